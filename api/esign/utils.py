
from itsdangerous import BadSignature, URLSafeSerializer
from .config import SECRET_KEY

def make_token(payload: dict, salt: str = "signing") -> str:
    s = URLSafeSerializer(SECRET_KEY, salt=salt)
    return s.dumps(payload)

def read_token(token: str, salt: str = "signing") -> dict:
    s = URLSafeSerializer(SECRET_KEY, salt=salt)
    return s.loads(token)

def try_read_token(token: str, salt: str = "signing"):
    try:
        return read_token(token, salt=salt)
    except BadSignature:
        return None
