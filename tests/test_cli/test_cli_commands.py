"""Tests for the command-line interface"""
import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import cli
from services.errors import ProviderSubmissionError


def async_context(service):
    """Make a mock usable as `async with Service() as s`"""
    service.__aenter__ = AsyncMock(return_value=service)
    service.__aexit__ = AsyncMock(return_value=False)
    return service


@pytest.fixture
def runway():
    """模拟Runway服务"""
    service = async_context(MagicMock())
    service.submit_text_to_image = AsyncMock(return_value="abc123")
    service.submit_image_to_video = AsyncMock(return_value="vid-1")
    service.get_task_status = AsyncMock(return_value={"id": "abc123", "status": "RUNNING"})
    with patch("cli.RunwayService", return_value=service):
        yield service


@pytest.fixture
def completion():
    """模拟补全服务"""
    service = async_context(MagicMock())
    service.complete = AsyncMock(return_value={"ok": True, "taglines": ["Fast"]})
    with patch("cli.CompletionService", return_value=service) as factory:
        service.factory = factory
        yield service


def last_json(output: str):
    """Parse the JSON document printed at the end of the output"""
    start = output.index("{")
    return json.loads(output[start:])


class TestSubmitCommands:
    """测试任务提交命令"""

    def test_image(self, runway, capsys):
        code = cli.main(["image", "A red sneaker", "--ratio", "1920:1080", "--seed", "4"])

        assert code == 0
        runway.submit_text_to_image.assert_awaited_once_with(prompt="A red sneaker", ratio="1920:1080", seed=4)
        assert last_json(capsys.readouterr().out) == {"id": "abc123"}

    def test_video_wait_until_succeeded(self, runway, capsys):
        runway.get_task_status.side_effect = [
            {"id": "vid-1", "status": "RUNNING", "progress": 0.5},
            {"id": "vid-1", "status": "SUCCEEDED", "output": ["https://cdn/x.mp4"]},
        ]

        code = cli.main([
            "video", "Slow dolly in", "https://i.ibb.co/frame.png",
            "--duration", "5", "--wait", "--interval", "0", "--max-attempts", "3",
        ])

        assert code == 0
        kwargs = runway.submit_image_to_video.call_args.kwargs
        assert kwargs["source_image"] == "https://i.ibb.co/frame.png"
        assert kwargs["duration"] == 5
        assert runway.get_task_status.await_count == 2
        assert '"SUCCEEDED"' in capsys.readouterr().out

    def test_wait_on_failed_task(self, runway):
        runway.get_task_status.return_value = {"id": "abc123", "status": "FAILED", "failure": "moderation"}

        code = cli.main(["image", "p", "--wait", "--interval", "0", "--max-attempts", "2"])

        assert code == 1

    def test_wait_timeout(self, runway, capsys):
        code = cli.main(["image", "p", "--wait", "--interval", "0", "--max-attempts", "2"])

        assert code == 1
        assert runway.get_task_status.await_count == 2
        assert "did not finish" in capsys.readouterr().err

    def test_submission_error(self, runway, capsys):
        runway.submit_text_to_image.side_effect = ProviderSubmissionError(
            "RunwayML did not return a task ID", provider="runway", provider_response={"detail": "x"}
        )

        code = cli.main(["image", "p"])

        assert code == 1
        assert "RunwayML did not return a task ID" in capsys.readouterr().err


class TestStatusCommand:
    """测试状态查询命令"""

    def test_status(self, runway, capsys):
        code = cli.main(["status", "abc123"])

        assert code == 0
        runway.get_task_status.assert_awaited_once_with("abc123")
        assert json.loads(capsys.readouterr().out) == {"id": "abc123", "status": "RUNNING"}


class TestCompleteCommand:
    """测试补全命令"""

    def test_form(self, completion, capsys):
        code = cli.main(["complete", "--form", "branding/tagline", "--data", '{"brandName":"Acme","count":3}'])

        assert code == 0
        prompt = completion.complete.call_args.args[0]
        assert prompt.startswith('Generate 3 taglines for brand: {"brandName":"Acme","count":3}.')
        assert json.loads(capsys.readouterr().out) == {"ok": True, "taglines": ["Fast"]}

    def test_free_prompt_with_model(self, completion):
        code = cli.main(["complete", "Write a slogan", "--instructions", "Be brief", "--model", "test/model"])

        assert code == 0
        completion.factory.assert_called_once_with(model="test/model")
        completion.complete.assert_awaited_once_with("Write a slogan", instructions="Be brief")

    def test_error_result_exit_code(self, completion):
        completion.complete.return_value = {"ok": False, "error": "no response from model"}

        assert cli.main(["complete", "hello"]) == 1

    def test_unknown_form(self, completion):
        assert cli.main(["complete", "--form", "ads/tiktok"]) == 2
        completion.complete.assert_not_called()

    def test_invalid_data(self, completion):
        assert cli.main(["complete", "--form", "ads/google", "--data", "{nope"]) == 2


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()
