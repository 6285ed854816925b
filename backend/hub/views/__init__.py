from hub.views.auth_handlers import (
    login as login,
)
from hub.views.auth_handlers import (
    register as register,
)
from hub.views.user_handlers import (
    current_account as current_account,
)
