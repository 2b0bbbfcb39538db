__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "authenticate_user",
    "get_current_user",
    "require_admin",
    "require_mentor",
    "oauth2_scheme",
    "is_email_enabled",
    "send_email",
]

_SECURITY_NAMES = {
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "authenticate_user",
    "get_current_user",
    "require_admin",
    "require_mentor",
    "oauth2_scheme",
}


def __getattr__(name):
    if name in _SECURITY_NAMES:
        from . import security as _security
        return getattr(_security, name)
    if name in {"is_email_enabled", "send_email"}:
        from . import email as _email
        return getattr(_email, name)
    raise AttributeError(f"module 'peermentor.utils' has no attribute '{name}'")
