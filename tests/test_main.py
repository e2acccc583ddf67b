"""CLI wiring tests"""
import pytest
from rich.console import Console

from src.analysis import AnalysisClient
from src.camera.controller import CameraController
from src.config import Config
from src.main import build_vision_client, main, parse_args, run
from src.state_machine import AnalysisState
from src.vision.claude import ClaudeVisionClient
from src.vision.gemini import GeminiVisionClient
from src.vision.openai import OpenAIVisionClient
from tests.fakes import (
    CAT_JSON,
    PNG_BYTES,
    FakeDevice,
    FakeStream,
    NotAllowedError,
    RecordingSleep,
    ScriptedBackend,
)


def _config(**overrides) -> Config:
    values = dict(
        vision_provider="gemini",
        log_level="INFO",
        gemini_api_key="key",
        gemini_base_url="https://vision.example/models",
        gemini_model="m",
        openai_api_key=None,
        openai_model="gpt-4o",
        anthropic_api_key=None,
        claude_model="claude-opus-4-6",
        camera_index=0,
        camera_warmup=0.0,
    )
    values.update(overrides)
    return Config(**values)


def _client(*outcomes, api_key="key"):
    return AnalysisClient(ScriptedBackend(*outcomes, api_key=api_key), sleep=RecordingSleep())


@pytest.mark.parametrize(
    "provider,expected",
    [
        ("gemini", GeminiVisionClient),
        ("openai", OpenAIVisionClient),
        ("anthropic", ClaudeVisionClient),
    ],
)
def test_build_vision_client_per_provider(provider, expected):
    assert isinstance(build_vision_client(_config(vision_provider=provider)), expected)


@pytest.mark.parametrize(
    "provider,key_field,model",
    [
        ("gemini", "gemini_api_key", "m"),
        ("openai", "openai_api_key", "gpt-4o"),
        ("anthropic", "anthropic_api_key", "claude-opus-4-6"),
    ],
)
def test_build_vision_client_uses_active_provider_credential(provider, key_field, model):
    keys = {"gemini_api_key": None, key_field: "secret"}
    config = _config(vision_provider=provider, **keys)

    client = build_vision_client(config)

    assert client.is_configured
    assert client._model == model


def test_parse_args():
    args = parse_args(["--camera", "--warmup", "0.5"])

    assert args.camera is True
    assert args.warmup == 0.5
    assert args.image is None


async def test_run_file_upload_completes(tmp_path):
    path = tmp_path / "cat.png"
    path.write_bytes(PNG_BYTES)
    console = Console(record=True, width=100)

    snapshot = await run(
        parse_args([str(path)]), _config(), console, client=_client(CAT_JSON)
    )

    assert snapshot.state is AnalysisState.COMPLETE
    output = console.export_text()
    assert "Analyzing..." in output
    assert "Analysis Complete" in output
    assert "A small domestic feline." in output


async def test_run_rejected_file_never_analyzes(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    backend = ScriptedBackend(CAT_JSON)
    console = Console(record=True, width=100)

    snapshot = await run(
        parse_args([str(path)]),
        _config(),
        console,
        client=AnalysisClient(backend, sleep=RecordingSleep()),
    )

    assert snapshot.state is AnalysisState.IDLE
    assert backend.requests == []
    assert "valid image file" in console.export_text()


async def test_run_camera_snaps_and_releases_device():
    stream = FakeStream()
    camera = CameraController(FakeDevice(stream), sleep=RecordingSleep())
    console = Console(record=True, width=100)

    snapshot = await run(
        parse_args(["--camera", "--warmup", "0"]),
        _config(),
        console,
        camera=camera,
        client=_client(CAT_JSON),
    )

    assert snapshot.state is AnalysisState.COMPLETE
    assert stream.stop_calls == 1
    assert not camera.is_streaming
    assert "Camera Active - Snap to Analyze" in console.export_text()


async def test_run_camera_unavailable_reports_error():
    camera = CameraController(FakeDevice(NotAllowedError("denied")), sleep=RecordingSleep())
    console = Console(record=True, width=100)

    snapshot = await run(
        parse_args(["--camera"]), _config(), console, camera=camera, client=_client(CAT_JSON)
    )

    assert snapshot.state is AnalysisState.IDLE
    assert "NotAllowedError" in console.export_text()


async def test_run_without_credential_reports_missing_key(tmp_path):
    path = tmp_path / "cat.png"
    path.write_bytes(PNG_BYTES)
    console = Console(record=True, width=100)

    snapshot = await run(
        parse_args([str(path)]), _config(), console, client=_client(CAT_JSON, api_key=None)
    )

    assert snapshot.state is AnalysisState.CREDENTIAL_MISSING
    assert "API Key Missing!" in console.export_text()


def test_main_without_input_exits_with_usage_error(monkeypatch):
    monkeypatch.setattr("src.config.load_dotenv", lambda **_: None)
    monkeypatch.setattr("src.main._setup_logging", lambda level: None)
    monkeypatch.delenv("VISION_PROVIDER", raising=False)

    assert main([]) == 2


def test_main_exit_code_follows_final_state(monkeypatch, tmp_path):
    monkeypatch.setattr("src.config.load_dotenv", lambda **_: None)
    monkeypatch.setattr("src.main._setup_logging", lambda level: None)
    monkeypatch.delenv("VISION_PROVIDER", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    path = tmp_path / "cat.png"
    path.write_bytes(PNG_BYTES)

    assert main([str(path)]) == 1
