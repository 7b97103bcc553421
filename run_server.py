#!/usr/bin/env python3
"""
Development server launcher for the SnapSolve API.

Requires GEMINI_API_KEY and GOOGLE_VISION_API_KEY in the environment.
For production, run the app under a proper ASGI server deployment.
"""

import logging
import uvicorn
import sys
from pathlib import Path

# Put the project root on the path so "src.*" imports resolve
project_root = Path(__file__).parent
src_path = project_root / "src"
sys.path.insert(0, str(project_root))

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger = logging.getLogger("run_server")
    logger.info("Starting SnapSolve API development server")
    logger.info("Server will be available at: http://localhost:8000")
    logger.info("API documentation at: http://localhost:8000/docs")

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,     # development only
        reload_dirs=[str(src_path)],
        log_level="info"
    )
