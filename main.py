from fastapi import FastAPI, HTTPException, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session
import os
import logging
from dotenv import load_dotenv
from db.database import Base, engine, get_db
from service.notification_service import LeaveNotifier
from utils.mail_config_utils import load_mail_config, notification_recipients

# models must be imported before create_all
import model.usermodels  # noqa: F401
import model.leave_model  # noqa: F401
import model.task_model  # noqa: F401
import model.otp_model  # noqa: F401
import model.company_model  # noqa: F401

from router.auth_router import router as auth_router
from router.user_router import router as user_router
from router.leave_router import router as leave_router
from router.task_router import router as task_router
from router.work_status_router import router as work_status_router
from router.company_router import router as company_router

from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Parse comma-separated origins and create list
FRONTEND_URL = os.getenv("FRONTEND_URL", "")
allowed_origins = [origin.strip() for origin in FRONTEND_URL.split(",") if origin.strip()]

# Remove duplicates while preserving order
allowed_origins = list(dict.fromkeys(allowed_origins))

# If no origins configured, allow localhost for development
if not allowed_origins:
    allowed_origins = ["http://localhost:3000", "http://localhost:8000"]

logger.info(f"Allowed CORS Origins: {allowed_origins}")


app = FastAPI(
    title="Leave & Task Tracker API",
    description="Leave requests, daily work logs and the manager attendance grid.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)

# process-wide mail client, handed to routes through get_notifier
app.state.notifier = LeaveNotifier(load_mail_config(), notification_recipients())

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(leave_router)
app.include_router(task_router)
app.include_router(work_status_router)
app.include_router(company_router)


@app.get("/")
def read_root():
    return {"message": "Welcome to the Leave & Task Tracker API!"}


@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {"status": "ok", "mail": app.state.notifier.is_available}
