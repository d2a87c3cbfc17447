from .auth_api import AuthApi
from .profile_api import ProfileApi
from .matches_api import MatchesApi

__all__ = ["AuthApi", "ProfileApi", "MatchesApi"]
