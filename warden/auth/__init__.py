from .tokens import generate_session_token, validate_session_token
