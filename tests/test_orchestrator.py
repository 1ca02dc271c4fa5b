"""Tests for the paste-image flow against a recording host."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest

from imagecomment.config import PROJECT_CONFIG_NAME, Settings, override_settings
from imagecomment.hosts.recording_host import RecordingHost
from imagecomment.paste.host import EditorContext, HostBinaryOpenError
from imagecomment.paste.models import ActionKind
from imagecomment.paste.orchestrator import PasteOrchestrator, PasteOutcome

from helpers import PNG_BYTES, FakeProbe, make_temp_image, user_image


def _host(workspace, language_id="typescript"):
    return RecordingHost(
        EditorContext(
            document_path=workspace / "src" / "app.ts" if workspace else None,
            language_id=language_id,
            workspace_root=workspace,
        )
    )


def _kinds(host):
    return [action.kind for action in host.actions]


def _inserted(host):
    return [a.text for a in host.actions if a.kind is ActionKind.INSERT]


@pytest.mark.asyncio
async def test_no_editor_runs_default_paste():
    probe = FakeProbe(make_temp_image)
    host = RecordingHost(None)

    result = await PasteOrchestrator(probe).paste_image(host)

    assert result.outcome is PasteOutcome.DEFAULT_PASTE
    assert _kinds(host) == [ActionKind.DEFAULT_PASTE]
    assert probe.calls == 0


@pytest.mark.asyncio
async def test_no_image_shows_info(workspace):
    host = _host(workspace)

    result = await PasteOrchestrator(FakeProbe(None)).paste_image(host)

    assert result.outcome is PasteOutcome.NO_IMAGE
    assert _kinds(host) == [ActionKind.STATUS, ActionKind.INFO]
    assert host.actions[0].text == "Detecting image in clipboard..."
    assert host.actions[0].timeout_ms == 10_000
    assert host.actions[1].text == "No image found in clipboard"
    assert not (workspace / ".image-comment").exists()


@pytest.mark.asyncio
async def test_temp_image_is_moved_and_comment_inserted(workspace, temp_dir):
    host = _host(workspace)

    result = await PasteOrchestrator(FakeProbe(make_temp_image)).paste_image(host)

    assert result.outcome is PasteOutcome.INSERTED
    assert result.saved_path.parent == workspace / ".image-comment"
    assert result.saved_path.read_bytes() == PNG_BYTES
    assert list(temp_dir.iterdir()) == []
    name = result.saved_path.name
    assert _inserted(host) == [f"// ![image](.image-comment/{name})"]
    assert result.text == _inserted(host)[0]
    assert result.file_name == name
    status = host.actions[-1]
    assert status.kind is ActionKind.STATUS
    assert status.text == f"Image saved: {name}"
    assert status.timeout_ms == 5000


@pytest.mark.asyncio
async def test_user_image_is_copied(workspace, tmp_path):
    original = tmp_path / "Pictures" / "cat.jpg"
    original.parent.mkdir()
    info = user_image(original)
    host = _host(workspace, language_id="python")

    result = await PasteOrchestrator(FakeProbe(info)).paste_image(host)

    assert result.outcome is PasteOutcome.INSERTED
    assert original.exists()
    assert result.saved_path.suffix == ".jpg"
    assert _inserted(host)[0].startswith("# ![image](.image-comment/image-")


@pytest.mark.asyncio
async def test_two_pastes_save_two_files(workspace):
    orchestrator = PasteOrchestrator(FakeProbe(make_temp_image))

    first = await orchestrator.paste_image(_host(workspace))
    second = await orchestrator.paste_image(_host(workspace))

    assert first.saved_path != second.saved_path
    assert len(list((workspace / ".image-comment").iterdir())) == 2


@pytest.mark.asyncio
async def test_timeout_reports_no_image_and_discards_late_result(workspace, temp_dir):
    override_settings(Settings(state_dir=str(workspace / "state"), probe_timeout_s=0.05))
    probe = FakeProbe(make_temp_image, delay=0.3)
    host = _host(workspace)

    result = await PasteOrchestrator(probe).paste_image(host)

    assert result.outcome is PasteOutcome.NO_IMAGE
    assert probe.tokens[0].cancelled
    assert host.actions[0].timeout_ms == 50

    await asyncio.sleep(0.5)
    assert _inserted(host) == []
    assert list(temp_dir.iterdir()) == []
    assert not (workspace / ".image-comment").exists()


@pytest.mark.asyncio
async def test_oversized_image_warns(workspace):
    host = _host(workspace)

    result = await PasteOrchestrator(FakeProbe(oversize=60 * 1024 * 1024)).paste_image(host)

    assert result.outcome is PasteOutcome.NO_IMAGE
    assert _kinds(host) == [ActionKind.STATUS, ActionKind.WARNING, ActionKind.INFO]
    assert host.actions[1].text == (
        "Image is too large (60.00MB). Maximum size is 50.00MB."
    )


@pytest.mark.asyncio
async def test_no_workspace_is_an_error(temp_dir):
    host = _host(None)

    result = await PasteOrchestrator(FakeProbe(make_temp_image)).paste_image(host)

    assert result.outcome is PasteOutcome.FAILED
    assert _kinds(host) == [ActionKind.STATUS, ActionKind.ERROR]
    assert host.actions[-1].text == "No workspace folder found"
    assert list(temp_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_save_failure_falls_back_to_default_paste(workspace, temp_dir):
    # A file where the save directory should be
    (workspace / ".image-comment").write_text("in the way")
    host = _host(workspace)

    result = await PasteOrchestrator(FakeProbe(make_temp_image)).paste_image(host)

    assert result.outcome is PasteOutcome.FAILED
    assert _kinds(host) == [ActionKind.STATUS, ActionKind.ERROR, ActionKind.DEFAULT_PASTE]
    assert host.actions[1].text.startswith("Failed to save image: ")
    assert list(temp_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_save_failure_never_deletes_user_file(workspace, tmp_path):
    (workspace / ".image-comment").write_text("in the way")
    original = tmp_path / "mine.png"
    info = user_image(original)

    result = await PasteOrchestrator(FakeProbe(info)).paste_image(_host(workspace))

    assert result.outcome is PasteOutcome.FAILED
    assert original.exists()


class _BinaryOpenHost(RecordingHost):
    async def insert_text(self, text: str) -> None:
        raise HostBinaryOpenError("cannot open binary file")


@pytest.mark.asyncio
async def test_binary_open_error_is_suppressed(workspace):
    host = _BinaryOpenHost(
        EditorContext(None, "typescript", workspace),
    )

    result = await PasteOrchestrator(FakeProbe(make_temp_image)).paste_image(host)

    assert result.outcome is PasteOutcome.SUPPRESSED
    assert _kinds(host) == [ActionKind.STATUS]


class _BrokenPasteHost(RecordingHost):
    async def default_paste(self) -> None:
        raise RuntimeError("clipboard locked")


@pytest.mark.asyncio
async def test_failing_fallback_is_logged_not_raised(workspace):
    (workspace / ".image-comment").write_text("in the way")
    host = _BrokenPasteHost(EditorContext(None, "c", workspace))

    result = await PasteOrchestrator(FakeProbe(make_temp_image)).paste_image(host)

    assert result.outcome is PasteOutcome.FAILED
    assert ActionKind.ERROR in _kinds(host)


@pytest.mark.asyncio
async def test_project_settings_change_output(workspace):
    (workspace / PROJECT_CONFIG_NAME).write_text(
        json.dumps(
            {
                "imageComment.saveDirectory": "docs/images",
                "imageComment.useRelativePath": False,
                "imageComment.commentTemplate": "Screenshot\n{path}",
            }
        )
    )
    host = _host(workspace, language_id="go")

    result = await PasteOrchestrator(FakeProbe(make_temp_image)).paste_image(host)

    assert result.saved_path.parent == workspace / "docs" / "images"
    assert _inserted(host) == [f"/* Screenshot\n{result.saved_path} */"]


@pytest.mark.asyncio
async def test_locale_setting(workspace):
    override_settings(Settings(state_dir=str(workspace / "state"), locale="zh-CN"))
    host = _host(workspace)

    await PasteOrchestrator(FakeProbe(None)).paste_image(host)

    assert host.actions[-1].text == "剪贴板中没有图片"


@pytest.mark.asyncio
async def test_custom_settings_provider(workspace):
    seen = []

    def provider(root):
        seen.append(root)
        return Settings(state_dir=str(workspace), save_directory="shots")

    orchestrator = PasteOrchestrator(FakeProbe(make_temp_image), settings_provider=provider)
    result = await orchestrator.paste_image(_host(workspace))

    assert seen == [workspace]
    assert result.saved_path.parent == workspace / "shots"
    assert orchestrator.probe_name == "fake"


class _ReadOnlyHost(RecordingHost):
    async def insert_text(self, text: str) -> None:
        raise PermissionError("document is read-only")


@pytest.mark.asyncio
async def test_insert_failure_keeps_saved_image(workspace):
    host = _ReadOnlyHost(EditorContext(None, "typescript", workspace))

    result = await PasteOrchestrator(FakeProbe(make_temp_image)).paste_image(host)

    assert result.outcome is PasteOutcome.SAVED
    assert result.saved_path.is_file()
    assert list((workspace / ".image-comment").iterdir()) == [result.saved_path]
    assert _kinds(host) == [ActionKind.STATUS, ActionKind.STATUS]
    assert host.actions[-1].text == f"Image saved: {result.file_name}"


@pytest.mark.asyncio
async def test_multiline_yaml_comment_is_reported(workspace):
    override_settings(
        Settings(state_dir=str(workspace / "state"), comment_template="Shot\n{path}")
    )
    logger = MagicMock()
    host = _host(workspace, language_id="yaml")

    orchestrator = PasteOrchestrator(FakeProbe(make_temp_image), logger=logger)
    result = await orchestrator.paste_image(host)

    assert result.outcome is PasteOutcome.INSERTED
    logger.warning.assert_any_call(
        "comment_block_unavailable",
        language="yaml",
        text=result.text,
    )


@pytest.mark.asyncio
async def test_single_line_yaml_comment_is_not_reported(workspace):
    logger = MagicMock()

    orchestrator = PasteOrchestrator(FakeProbe(make_temp_image), logger=logger)
    await orchestrator.paste_image(_host(workspace, language_id="yaml"))

    assert all(
        c.args[0] != "comment_block_unavailable" for c in logger.warning.call_args_list
    )
