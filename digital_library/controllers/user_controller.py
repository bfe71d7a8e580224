from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from digital_library.services import get_lending_service
from digital_library.services.auth_service import AuthService
from digital_library.utils.auth import current_user_id
from digital_library.utils.validators import validate_login, validate_registration

user_bp = Blueprint("users", __name__, url_prefix="/users")


@user_bp.post("/register")
def register():
    data = validate_registration(request.get_json(silent=True) or {})
    user = AuthService().register(**data)
    return jsonify({
        "success": True,
        "message": "User registered successfully",
        "data": {"user": user.to_dict()},
    }), 201


@user_bp.post("/login")
def login():
    data = validate_login(request.get_json(silent=True) or {})
    token, user = AuthService().login(data["email"], data["password"])
    return jsonify({
        "success": True,
        "message": "Login successful",
        "data": {"user": user.to_dict(), "token": token},
    })


@user_bp.get("/me")
@jwt_required()
def me():
    user = AuthService().get_profile(current_user_id())
    return jsonify({"success": True, "data": {"user": user.to_dict()}})


@user_bp.get("/me/borrowed-books")
@jwt_required()
def borrowed_books():
    books = get_lending_service().list_borrowed_books(current_user_id())
    return jsonify({"success": True, "data": {"books": books}})
