from .exceptions import InfrastructureException as InfrastructureException
from .exceptions import PersistenceException as PersistenceException
from .exceptions import UpstreamServiceException as UpstreamServiceException
