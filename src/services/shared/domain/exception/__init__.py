from .exceptions import (
    BusinessRuleViolationException as BusinessRuleViolationException,
)
from .exceptions import ConflictException as ConflictException
from .exceptions import DomainException as DomainException
from .exceptions import (
    DuplicateResourceException as DuplicateResourceException,
)
from .exceptions import (
    InvalidStateTransitionException as InvalidStateTransitionException,
)
from .exceptions import OptimisticLockException as OptimisticLockException
from .exceptions import (
    ResourceNotFoundException as ResourceNotFoundException,
)
