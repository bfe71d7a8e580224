from flask_jwt_extended import get_jwt_identity, get_jwt


def current_user_id() -> int:
    # identity is stored as a string in the token
    return int(get_jwt_identity())


def current_role():
    return (get_jwt() or {}).get("role")
