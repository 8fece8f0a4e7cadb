import importlib
from pathlib import Path
from config.database import engine, Base

API_DIR = Path(__file__).parent.parent / "api"

# Dictionary of loaded models keyed by table name
models = {}


def scan_models(directory: Path = API_DIR):
    """Import every ``*_model.py`` under ``api/`` so all mappers are registered."""
    for item in sorted(directory.rglob("*_model.py")):
        rel = item.relative_to(directory.parent).with_suffix("")
        module = importlib.import_module(".".join(rel.parts))
        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if hasattr(attr, "__tablename__") and hasattr(attr, "__table__"):
                models[attr.__tablename__] = attr
    return models


def init_db():
    scan_models()
    Base.metadata.create_all(bind=engine)
