from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from obimo.core.config import settings
from obimo.core.logging import configure_logging
from obimo.api.v1 import interactions, recommendations

configure_logging(app_env=settings.app_env, log_level=settings.log_level)

app = FastAPI(
    title="Obimo API",
    description="Recommendation backend for the Obimo van-life community app",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers (both are nested under the user they act for)
app.include_router(recommendations.router, prefix="/api/v1/users", tags=["Recommendations"])
app.include_router(interactions.router, prefix="/api/v1/users", tags=["Interactions"])


@app.get("/healthz")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "version": "1.0.0"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Obimo API", "docs": "/docs"}
