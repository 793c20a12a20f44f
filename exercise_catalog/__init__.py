"""Bundled exercise catalogue imported on first start."""
import os

DATA_PATH = os.path.join(os.path.dirname(__file__), "exercise_data.json")
