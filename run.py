"""Run the Caseload Planner FastAPI application with uvicorn."""

import uvicorn

from caseload_planner.application.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "caseload_planner.application.api:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
