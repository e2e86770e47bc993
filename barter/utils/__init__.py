__all__ = [
    "create_access_token",
    "get_current_user",
    "oauth2_scheme",
    "utcnow",
]


def __getattr__(name):
    if name in {"create_access_token", "get_current_user", "oauth2_scheme"}:
        from . import security as _security
        return getattr(_security, name)
    if name == "utcnow":
        from .clock import utcnow
        return utcnow
    raise AttributeError(f"module 'barter.utils' has no attribute '{name}'")
