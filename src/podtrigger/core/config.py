# src/podtrigger/core/config.py

import logging
import os

from dotenv import load_dotenv

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    """

    # --- Logging variables ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # --- ScaledObject custom resource ---
    SCALED_OBJECT_GROUP = os.getenv("SCALED_OBJECT_GROUP", "keda.sh")
    SCALED_OBJECT_VERSION = os.getenv("SCALED_OBJECT_VERSION", "v1alpha1")
    SCALED_OBJECT_PLURAL = os.getenv("SCALED_OBJECT_PLURAL", "scaledobjects")

    # --- Resource metrics API (metrics-server) ---
    METRICS_API_GROUP = os.getenv("METRICS_API_GROUP", "metrics.k8s.io")
    METRICS_API_VERSION = os.getenv("METRICS_API_VERSION", "v1beta1")

    # Outer deadline applied by callers around a single evaluation
    EVALUATION_TIMEOUT_SECONDS = float(os.getenv("EVALUATION_TIMEOUT_SECONDS", "30"))

    def validate_instance(self):
        if self.LOG_LEVEL.upper() not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
        if self.EVALUATION_TIMEOUT_SECONDS <= 0:
            raise ValueError("EVALUATION_TIMEOUT_SECONDS must be positive.")
        if not self.METRICS_API_GROUP or not self.METRICS_API_VERSION:
            logging.getLogger(__name__).warning("Metrics API group/version is empty; metrics listing will fail.")


# Instantiate the config to be imported by other modules
config = Config()
config.validate_instance()
