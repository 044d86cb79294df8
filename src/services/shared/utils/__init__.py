from .clock import Clock as Clock
from .clock import utc_now as utc_now
from .http_request import parse_body as parse_body
from .http_request import require_path_parameter as require_path_parameter
from .http_response import api_response as api_response
from .http_response import error_body as error_body
from .http_response import error_response as error_response
from .http_response import success_body as success_body
from .validators import to_decimal as to_decimal
from .validators import to_identifier as to_identifier
