# Authentication module

from portal.modules.auth.dependencies import (
    Privilege,
    verify_privilege,
    get_session,
    get_privilege,
    require_session,
    require_admin,
)
from portal.modules.auth.session import (
    build_session,
    read_session,
    write_session,
    clear_session,
)
