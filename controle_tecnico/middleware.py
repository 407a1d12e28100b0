"""
aiohttp middlewares: error envelope rendering and security headers.

Error mapping:
    AppError        -> its own status and code
    IntegrityError  -> 422 DECRYPTION_FAILED, no internals exposed
    HTTPNotFound    -> 404 NOT_FOUND envelope for unknown routes
    anything else   -> logged with traceback, 500 INTERNAL_ERROR
"""
import logging

from aiohttp import web

from .exceptions import AppError, IntegrityError
from .handlers.base import fail

logger = logging.getLogger("controle.api")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except AppError as err:
        return fail(err.to_dict(), err.status)
    except IntegrityError as err:
        logger.error(
            "Secret integrity check failed on %s: %s", request.path, err,
        )
        return fail(
            {
                "code": "DECRYPTION_FAILED",
                "message": "Não foi possível descriptografar o segredo",
            },
            422,
        )
    except web.HTTPNotFound:
        return fail(
            {"code": "NOT_FOUND", "message": "Rota não encontrada"}, 404,
        )
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail(
            {"code": "INTERNAL_ERROR", "message": "Erro interno do servidor"},
            500,
        )


async def add_security_headers(
    request: web.Request, response: web.StreamResponse
) -> None:
    """``on_response_prepare`` signal handler."""
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
