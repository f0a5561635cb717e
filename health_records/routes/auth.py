import bcrypt
from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import (
    create_access_token,
    get_current_user,
    get_jwt,
    jwt_required,
    set_access_cookies,
    unset_jwt_cookies,
)

from health_records.errors import Unauthorized
from health_records.routes import record_store
from health_records.schemas import LoginSchema, RegisterSchema, parse, user_schema

auth_bp = Blueprint('auth', __name__, url_prefix='/api')
register_schema = RegisterSchema()
login_schema = LoginSchema()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def _logged_in(user, status):
    token = create_access_token(identity=str(user.id))
    resp = jsonify(dict(user_schema.dump(user), access_token=token))
    set_access_cookies(resp, token)
    return resp, status


def register_jwt_callbacks(jwt):
    """Resolve token identities to users and answer every auth failure with 401."""

    @jwt.user_lookup_loader
    def load_user(_jwt_header, jwt_data):
        return record_store().get_user(int(jwt_data["sub"]))

    @jwt.token_in_blocklist_loader
    def token_revoked(_jwt_header, jwt_payload):
        return record_store().is_token_revoked(jwt_payload["jti"])

    def unauthorized(msg):
        return jsonify({"msg": msg}), 401

    jwt.unauthorized_loader(lambda reason: unauthorized("Unauthorized"))
    jwt.invalid_token_loader(lambda reason: unauthorized("Invalid token"))
    jwt.expired_token_loader(lambda header, payload: unauthorized("Token has expired"))
    jwt.revoked_token_loader(lambda header, payload: unauthorized("Token has been revoked"))
    jwt.user_lookup_error_loader(lambda header, payload: unauthorized("User not found"))


@auth_bp.route('/register', methods=['POST'])
def register():
    data = parse(register_schema, request.get_json(silent=True))
    user = record_store().create_user(
        data['username'], hash_password(data['password']), role=data['role']
    )
    current_app.logger.info(f"Registered user {user.id} ({user.username})")
    return _logged_in(user, 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    data = parse(login_schema, request.get_json(silent=True))
    u = record_store().get_user_by_username(data['username'])
    if u and check_password(data['password'], u.password_hash):
        return _logged_in(u, 200)
    current_app.logger.warning(f"Failed login for username '{data['username']}'")
    raise Unauthorized("Invalid credentials")


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    record_store().revoke_token(get_jwt()["jti"])
    resp = jsonify({"msg": "Logged out"})
    unset_jwt_cookies(resp)
    return resp, 200


@auth_bp.route('/user', methods=['GET'])
@jwt_required()
def me():
    return jsonify(user_schema.dump(get_current_user())), 200
