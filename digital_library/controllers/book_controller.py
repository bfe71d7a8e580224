# digital_library/controllers/book_controller.py

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required

from digital_library.services import get_book_service, get_lending_service, get_openlibrary_client
from digital_library.utils.auth import current_user_id
from digital_library.utils.decorators import admin_required
from digital_library.utils.pagination import validate_pagination_params
from digital_library.utils.validators import (
    validate_book_input,
    validate_book_update,
    validate_search_query,
)

book_bp = Blueprint("books", __name__, url_prefix="/books")


def _page_args():
    return validate_pagination_params(
        request.args.get("page"),
        request.args.get("limit"),
        default_limit=current_app.config["LIST_PER_PAGE"],
        max_limit=current_app.config["MAX_PER_PAGE"],
    )


def _paged(result):
    return {
        "data": [b.to_dict() for b in result["data"]],
        "pagination": result["pagination"],
    }


@book_bp.get("")
def list_books():
    page, limit = _page_args()
    result = get_book_service().list_books(page, limit)
    return jsonify({"success": True, "data": _paged(result)})


@book_bp.get("/search")
def search_external():
    query = validate_search_query(request.args.get("q"))
    page, limit = _page_args()
    results = get_openlibrary_client().search_books(query, page=page, limit=limit)
    return jsonify({"success": True, "data": results})


@book_bp.get("/local-search")
def search_local():
    query = validate_search_query(request.args.get("q"))
    page, limit = _page_args()
    result = get_book_service().search_books(query, page, limit)
    return jsonify({"success": True, "data": _paged(result)})


@book_bp.get("/<int:book_id>")
def get_book(book_id: int):
    b = get_book_service().get_book(book_id)
    return jsonify({"success": True, "data": {"book": b.to_dict()}})


@book_bp.post("")
@jwt_required()
@admin_required
def create_book():
    fields = validate_book_input(request.get_json(silent=True) or {})
    b = get_book_service().create_book(fields)
    return jsonify({
        "success": True,
        "message": "Book created successfully",
        "data": {"book": b.to_dict()},
    }), 201


@book_bp.put("/<int:book_id>")
@jwt_required()
@admin_required
def update_book(book_id: int):
    fields = validate_book_update(request.get_json(silent=True) or {})
    b = get_book_service().update_book(book_id, fields)
    return jsonify({
        "success": True,
        "message": "Book updated successfully",
        "data": {"book": b.to_dict()},
    })


@book_bp.delete("/<int:book_id>")
@jwt_required()
@admin_required
def delete_book(book_id: int):
    get_book_service().delete_book(book_id)
    return jsonify({"success": True, "message": "Book deleted successfully"})


@book_bp.post("/<int:book_id>/borrow")
@jwt_required()
def borrow_book(book_id: int):
    result = get_lending_service().borrow(current_user_id(), book_id)
    return jsonify({
        "success": True,
        "message": "Book borrowed successfully",
        "data": {
            "book": result["book"].to_dict(),
            "borrowRecord": result["borrow_record"].to_dict(),
            "dueDate": result["due_date"],
        },
    })


@book_bp.post("/<int:book_id>/return")
@jwt_required()
def return_book(book_id: int):
    result = get_lending_service().return_book(current_user_id(), book_id)
    return jsonify({
        "success": True,
        "message": "Book returned successfully",
        "data": {
            "book": result["book"].to_dict(),
            "borrowRecord": result["borrow_record"].to_dict(),
        },
    })


@book_bp.get("/<int:book_id>/borrow-history")
@jwt_required()
@admin_required
def borrow_history(book_id: int):
    history = get_lending_service().borrow_history(book_id)
    return jsonify({"success": True, "data": history})
