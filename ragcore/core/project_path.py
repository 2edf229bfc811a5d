from pathlib import Path

# Absolute path to the project root, assuming this file is in ragcore/core/
PROJECT_PATH = Path(__file__).resolve().parent.parent.parent

DATA_VOLUME = PROJECT_PATH / "datavolume"
