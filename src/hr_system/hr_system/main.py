from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import ApiJSONProvider, register_error_handlers
from .container import Container, build_container
from .core.policy import AttendancePolicy, LeavePolicy, PayrollPolicy
from .database.bootstrap import apply_schema, ensure_admin_account, list_tables
from .departments.controller import register as register_departments
from .employees.controller import register as register_employees
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll
from .performance.controller import register as register_performance
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)
    app.json = ApiJSONProvider(app)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_admin_account(
                db_config,
                name=getattr(settings, "ADMIN_NAME", "System Administrator"),
                email=getattr(settings, "ADMIN_EMAIL"),
                password=getattr(settings, "ADMIN_PASSWORD"),
            )

        container = build_container(
            db_config=db_config,
            payroll_policy=PayrollPolicy.from_mapping(getattr(settings, "PAYROLL_POLICY", None)),
            leave_policy=LeavePolicy.from_mapping(getattr(settings, "LEAVE_POLICY", None)),
            attendance_policy=AttendancePolicy.from_mapping(getattr(settings, "ATTENDANCE_POLICY", None)),
        )

    register_error_handlers(app)
    register_users(app, container)
    register_employees(app, container)
    register_departments(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_payroll(app, container)
    register_performance(app, container)

    @app.get("/api/health", endpoint="health")
    def health():
        return {"status": "OK", "message": "HR System API is running"}

    return app
