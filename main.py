from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from examhub.core.config import settings
from examhub.core.exceptions import ExamHubError
from examhub.core.logging import configure_logging
from examhub.endpoints import admin, attempt, balance, bank, user_attempts
from fastapi.exceptions import RequestValidationError
from examhub.middleware.exceptions import global_exception_handler, validation_exception_handler
from examhub.middleware.logging import RequestLoggingMiddleware
from examhub.schemas.response import HealthStatus

configure_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(ExamHubError, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(bank.router, prefix="/banks", tags=["Exam Tokens & Attempts"])
app.include_router(attempt.router, prefix="/attempts", tags=["Attempts"])
app.include_router(user_attempts.router, prefix="/users", tags=["Attempt History"])
app.include_router(balance.router, prefix="/me", tags=["Balance"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])

@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check():
    return HealthStatus(version=settings.VERSION)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
