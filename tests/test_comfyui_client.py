"""Tests for the ComfyUI client against a mocked HTTP transport."""

import base64
import json

import httpx
import pytest

from fitcheck.config import ComfyUIConfig, GenerationConfig
from fitcheck.errors import GenerationError
from fitcheck.models import Garment
from fitcheck.poses import POSE_INSTRUCTIONS
from fitcheck.services.comfyui_client import ComfyUIClient
from fitcheck.utils.images import decode_data_url, encode_data_url


class FakeComfyUI:
    """Minimal stand-in for the ComfyUI HTTP API."""

    def __init__(self, output_bytes: bytes, fail_prompt: bool = False, execution_error: bool = False,
                 pending_polls: int = 1):
        self.output_bytes = output_bytes
        self.fail_prompt = fail_prompt
        self.execution_error = execution_error
        self.uploads: list[str] = []
        self.workflows: list[dict] = []
        self.pending_polls = pending_polls
        self.history_polls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/system_stats":
            return httpx.Response(200, json={"system": {}})
        if path == "/upload/image":
            name = f"upload_{len(self.uploads)}.png"
            self.uploads.append(name)
            return httpx.Response(200, json={"name": name, "subfolder": "", "type": "input"})
        if path == "/prompt":
            if self.fail_prompt:
                return httpx.Response(400, text="invalid workflow")
            self.workflows.append(json.loads(request.content)["prompt"])
            return httpx.Response(200, json={"prompt_id": "p-1"})
        if path == "/history/p-1":
            self.history_polls += 1
            if self.history_polls <= self.pending_polls:
                return httpx.Response(200, json={})
            if self.execution_error:
                return httpx.Response(200, json={"p-1": {"status": {"status_str": "error"}, "outputs": {}}})
            return httpx.Response(200, json={"p-1": {"outputs": {"save": {"images": [
                {"filename": "fitcheck_output_0001.png", "subfolder": "", "type": "output"}
            ]}}}})
        if path == "/view":
            return httpx.Response(200, content=self.output_bytes)
        return httpx.Response(404)


def make_client(fake: FakeComfyUI, **config):
    return ComfyUIClient(
        config=ComfyUIConfig(poll_interval=0.0, **config),
        generation=GenerationConfig(seed=42),
        transport=httpx.MockTransport(fake),
    )


@pytest.fixture
def garment(png_bytes):
    return Garment(id="tee-1", name="White Tee", url=encode_data_url(png_bytes))


class TestConnection:
    """Tests for connection checks."""

    @pytest.mark.asyncio
    async def test_check_connection(self, png_bytes):
        client = make_client(FakeComfyUI(png_bytes))
        assert await client.check_connection() is True
        await client.close()

    @pytest.mark.asyncio
    async def test_check_connection_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused")

        client = ComfyUIClient(ComfyUIConfig(), transport=httpx.MockTransport(refuse))
        assert await client.check_connection() is False


class TestGeneration:
    """Tests for the two generation calls."""

    @pytest.mark.asyncio
    async def test_garment_application_uses_two_references(self, png_bytes, garment):
        fake = FakeComfyUI(png_bytes)
        client = make_client(fake)

        result = await client.generate_garment_application(encode_data_url(png_bytes), garment)

        assert result.startswith("data:image/png;base64,")
        assert decode_data_url(result) == png_bytes
        assert fake.uploads == ["upload_0.png", "upload_1.png"]

        workflow = fake.workflows[0]
        assert workflow["ref0_load"]["inputs"]["image"] == "upload_0.png"
        assert workflow["ref1_load"]["inputs"]["image"] == "upload_1.png"
        assert workflow["106"]["inputs"]["positive"] == ["ref1_positive", 0]
        assert workflow["109"]["inputs"]["noise_seed"] == 42
        assert "White Tee" in workflow["112"]["inputs"]["text"]

    @pytest.mark.asyncio
    async def test_pose_variation_uses_one_reference(self, png_bytes):
        fake = FakeComfyUI(png_bytes)
        client = make_client(fake)

        await client.generate_pose_variation(encode_data_url(png_bytes), POSE_INSTRUCTIONS[2])

        workflow = fake.workflows[0]
        assert "ref1_load" not in workflow
        assert workflow["106"]["inputs"]["positive"] == ["ref0_positive", 0]
        assert "Side profile view" in workflow["112"]["inputs"]["text"]

    @pytest.mark.asyncio
    async def test_local_path_reference(self, png_bytes, tmp_path):
        image_path = tmp_path / "model.png"
        image_path.write_bytes(png_bytes)
        fake = FakeComfyUI(png_bytes)

        await make_client(fake).generate_pose_variation(str(image_path), POSE_INSTRUCTIONS[1])

        assert len(fake.uploads) == 1


class TestFailures:
    """Tests for failures surfacing as GenerationError."""

    @pytest.mark.asyncio
    async def test_rejected_workflow(self, png_bytes, garment):
        client = make_client(FakeComfyUI(png_bytes, fail_prompt=True))

        with pytest.raises(GenerationError, match="rejected workflow"):
            await client.generate_garment_application(encode_data_url(png_bytes), garment)

    @pytest.mark.asyncio
    async def test_execution_error(self, png_bytes):
        client = make_client(FakeComfyUI(png_bytes, execution_error=True))

        with pytest.raises(GenerationError, match="execution failed"):
            await client.generate_pose_variation(encode_data_url(png_bytes), POSE_INSTRUCTIONS[1])

    @pytest.mark.asyncio
    async def test_timeout(self, png_bytes):
        fake = FakeComfyUI(png_bytes, pending_polls=10**9)
        client = make_client(fake, timeout=0.05)

        with pytest.raises(GenerationError, match="timed out"):
            await client.generate_pose_variation(encode_data_url(png_bytes), POSE_INSTRUCTIONS[1])

    @pytest.mark.asyncio
    async def test_transport_error(self, png_bytes):
        def refuse(request):
            raise httpx.ConnectError("connection refused")

        client = ComfyUIClient(ComfyUIConfig(), transport=httpx.MockTransport(refuse))

        with pytest.raises(GenerationError, match="ComfyUI request failed"):
            await client.generate_pose_variation(encode_data_url(png_bytes), POSE_INSTRUCTIONS[1])

    @pytest.mark.asyncio
    async def test_unreadable_reference(self):
        client = make_client(FakeComfyUI(b""))
        not_an_image = "data:image/png;base64," + base64.b64encode(b"plain text").decode()

        with pytest.raises(GenerationError, match="Unsupported image"):
            await client.generate_pose_variation(not_an_image, POSE_INSTRUCTIONS[1])

    @pytest.mark.asyncio
    async def test_missing_file_reference(self, tmp_path):
        client = make_client(FakeComfyUI(b""))

        with pytest.raises(GenerationError, match="not found"):
            await client.generate_pose_variation(str(tmp_path / "missing.png"), POSE_INSTRUCTIONS[1])
