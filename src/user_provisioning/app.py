# src/user_provisioning/app.py
from wsgiref.simple_server import make_server
import json
import logging
import re
import sys

from pydantic import ValidationError

from user_provisioning.clients.gotrue_identity_provider import GoTrueIdentityProvider
from user_provisioning.clients.interfaces import IIdentityProvider
from user_provisioning.config import Settings, load_settings
from user_provisioning.database.database import create_db_engine, make_session_factory
from user_provisioning.database.db_init import initialize_db
from user_provisioning.repositories.sqlalchemy import SqlalchemyUserRepository
from user_provisioning.schemas import UserCreateRequest
from user_provisioning.services.exceptions import *
from user_provisioning.services.provisioning_service import ProvisioningService
from user_provisioning.services.user_service import UserService, serialize_user, serialize_user_with_teams
from user_provisioning.utils.log import configure_logging

logger = logging.getLogger("user_provisioning.app")

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

class MalformedBodyError(ValueError):
    """요청 본문이 JSON이 아니거나 객체가 아닐 때"""
    pass

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise MalformedBodyError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise MalformedBodyError("Request body must be a JSON object.")
    return data

def get_caller_session(environ):
    header = environ.get("HTTP_AUTHORIZATION", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Missing bearer token.")
    return environ['identity_provider'].get_session(token.strip())

def handle_exception(e):
    error_map = {
        MalformedBodyError: "400 Bad Request",
        UnauthorizedError: "401 Unauthorized",
        ForbiddenError: "403 Forbidden",
        EmailAlreadyExistsError: "409 Conflict",
        DuplicateEmailError: "409 Conflict",
    }
    if isinstance(e, ValidationError):
        details = json.loads(e.json(include_url=False, include_input=False))
        return "400 Bad Request", json.dumps({"error": "Validation failed", "details": details})

    status = error_map.get(type(e))
    if status is None:
        logger.exception("Unhandled error while processing request: %s", e)
        return "500 Internal Server Error", json.dumps({"error": "Internal server error", "details": str(e)})
    if isinstance(e, (EmailAlreadyExistsError, DuplicateEmailError)):
        return status, json.dumps({"error": "Email already exists"})
    return status, json.dumps({"error": str(e)})

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def make_application(session_factory, identity_provider: IIdentityProvider, settings: Settings):
    """요청마다 DB 세션과 서비스를 새로 만드는 WSGI 애플리케이션을 생성합니다."""

    routes = [
        ('POST', r'^/users$', create_user_handler),
        ('GET', r'^/users$', list_users_handler),
    ]

    def application(environ, start_response):
        db_session = session_factory()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            user_repo = SqlalchemyUserRepository(db_session)

            provisioning_service = ProvisioningService(
                user_repo, identity_provider, settings.self_registration_role
            )
            user_service = UserService(user_repo)

            # 2. 생성된 서비스 객체들을 environ을 통해 핸들러에 전달
            environ['services'] = {
                'provisioning': provisioning_service,
                'users': user_service,
            }
            environ['identity_provider'] = identity_provider

            # 3. 라우팅 및 핸들러 실행
            path = environ.get("PATH_INFO", "")
            method = environ.get("REQUEST_METHOD", "")

            handler, path_args = None, []
            for route_method, pattern, route_handler in routes:
                if method == route_method and (match := re.match(pattern, path)):
                    handler, path_args = route_handler, match.groups()
                    break

            if handler:
                status, response_body = handler(environ, *path_args)
            else:
                status, response_body = '404 Not Found', json.dumps({'error': 'Not Found'})

        except Exception as e:
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def create_user_handler(environ, *args):
    # 가입은 인증 없이 허용
    request = UserCreateRequest.model_validate(get_request_data(environ))
    logger.info("Attempting to sign up user with email: %s", request.email)
    result = environ['services']['provisioning'].register_user(
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.role,
    )
    body = {"success": True, "data": serialize_user(result.user)}
    if result.message:
        body["message"] = result.message
    return '201 Created', json.dumps(body)

def list_users_handler(environ, *args):
    caller = get_caller_session(environ)
    users = environ['services']['users'].list_all_users(caller)
    return '200 OK', json.dumps({"success": True, "data": [serialize_user_with_teams(u) for u in users]})

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

def main():
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level)
    engine = create_db_engine(settings.database_url, settings.database_timeout)
    initialize_db(engine)
    identity_provider = GoTrueIdentityProvider(
        settings.identity_provider_url,
        settings.identity_provider_anon_key,
        settings.identity_provider_service_key,
        timeout=settings.identity_provider_timeout,
    )
    application = make_application(make_session_factory(engine), identity_provider, settings)

    try:
        with make_server(settings.host, settings.port, application) as httpd:
            logger.info("Serving user provisioning API on port %s...", settings.port)
            httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down.")
    finally:
        identity_provider.close()
        engine.dispose()

if __name__ == "__main__":
    main()
