# Test fixtures and configuration
import io
import itertools
import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from PIL import Image

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fitcheck.models import Garment
from fitcheck.session import SessionController
from fitcheck.storage import MemoryStorage, SavedOutfitStore
from fitcheck.wardrobe import WardrobeSet


MODEL_IMAGE = "data:image/png;base64,bW9kZWw="


@pytest.fixture
def model_image():
    return MODEL_IMAGE


@pytest.fixture
def garments():
    """A few garments keyed by short name."""
    return {
        "tee": Garment(id="tee-1", name="White Tee", url="data:image/png;base64,dGVl"),
        "jacket": Garment(id="jacket-1", name="Denim Jacket", url="data:image/png;base64,amFja2V0"),
        "scarf": Garment(id="scarf-1", name="Wool Scarf", url="data:image/png;base64,c2NhcmY="),
    }


@pytest.fixture
def generator():
    """Generator double returning a distinct image per call."""
    counter = itertools.count(1)

    async def apply(base_image, garment):
        return f"generated://{garment.id}/{next(counter)}"

    async def pose(base_image, instruction):
        return f"generated://pose/{instruction}/{next(counter)}"

    mock = AsyncMock()
    mock.generate_garment_application = AsyncMock(side_effect=apply)
    mock.generate_pose_variation = AsyncMock(side_effect=pose)
    return mock


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return SavedOutfitStore(storage)


@pytest.fixture
def session(generator, store):
    """Session with an empty default wardrobe."""
    return SessionController(generator, store, wardrobe=WardrobeSet(defaults=()))


@pytest.fixture
def started_session(session, model_image):
    session.finalize_model(model_image)
    return session


@pytest.fixture
def png_bytes():
    """A real 2x2 PNG image."""
    output = io.BytesIO()
    Image.new("RGB", (2, 2), color=(200, 30, 30)).save(output, format="PNG")
    return output.getvalue()
