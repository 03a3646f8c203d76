from typetester.controllers.admin import FontAdminController
from typetester.controllers.auth import AuthController
from typetester.controllers.fonts import FontController

__all__ = ["AuthController", "FontAdminController", "FontController"]
