from __future__ import annotations

import logging

from flask import Flask, current_app, jsonify, request

from ..common.http import json_ok, request_payload
from ..container import Container
from ..core.exceptions import AuthenticationError
from ..core.permissions import USER_MANAGER_ROLES

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    gate = container.session_gate

    def _set_session_cookie(response, token: str) -> None:
        response.set_cookie(
            gate.cookie_name,
            token,
            max_age=int(current_app.config["SESSION_MAX_AGE_SECONDS"]),
            httponly=True,
            samesite="Lax",
            secure=bool(current_app.config.get("SESSION_COOKIE_SECURE", False)),
        )

    # ---- authentication ----

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = request_payload()
        username = data.get("username")
        try:
            identity = container.auth_service.authenticate(username, data.get("password"))
        except AuthenticationError:
            logger.warning("Failed login for %r from %s", username, request.remote_addr)
            raise

        session = gate.store.create(identity.user_id)
        logger.info("User %s logged in", identity.username)

        response, status = json_ok(user=identity.to_dict())
        _set_session_cookie(response, session.token)
        return response, status

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    @gate.login_required
    def logout():
        identity = gate.require_identity()
        token = request.cookies.get(gate.cookie_name)
        if token:
            gate.store.destroy(token)
        logger.info("User %s logged out", identity.username)

        response, status = json_ok(message="Logged out successfully")
        response.delete_cookie(gate.cookie_name)
        return response, status

    @app.route("/api/auth/status", methods=["GET"], endpoint="auth_status")
    def status():
        identity = gate.current_identity()
        if identity is None:
            return jsonify({"authenticated": False})
        return jsonify({"authenticated": True, "user": identity.to_dict()})

    # ---- users & mains ----

    @app.route("/api/users/mains", methods=["GET"], endpoint="users_mains")
    def list_mains():
        return json_ok(mains=container.main_service.list_mains())

    @app.route("/api/users/create", methods=["POST"], endpoint="users_create")
    @gate.roles_required(*USER_MANAGER_ROLES)
    def create_user():
        data = request_payload()
        user = container.user_service.create_account(
            username=data.get("username"),
            password=data.get("password"),
            email=data.get("email"),
            role_name=data.get("roleName"),
        )
        return json_ok(message="User created successfully", user=user)

    @app.route("/api/users/promote", methods=["POST"], endpoint="users_promote")
    @gate.roles_required(*USER_MANAGER_ROLES)
    def promote_user():
        data = request_payload()
        container.user_service.promote(user_id=data.get("userID"), new_role_name=data.get("newRoleName"))
        return json_ok(message="User role updated successfully")

    @app.route("/api/users/assign-main", methods=["POST"], endpoint="users_assign_main")
    @gate.roles_required(*USER_MANAGER_ROLES)
    def assign_main():
        data = request_payload()
        container.user_service.assign_main(user_id=data.get("userID"), main_id=data.get("mainID"))
        return json_ok(message="Handler assigned to main successfully")

    @app.route("/api/users/list", methods=["GET"], endpoint="users_list")
    @gate.roles_required(*USER_MANAGER_ROLES)
    def list_users():
        return json_ok(users=container.user_service.list_users())
