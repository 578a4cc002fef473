"""Tests for card export, share links and the PNG worker."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from conftest import make_response
from gh_wrapped import export, export_worker
from gh_wrapped.errors import ExportError
from gh_wrapped.export import (
    Exporter,
    browser_installed,
    ensure_browser,
    fetch_avatar_data_uri,
    open_path,
    render_card_html,
    run_export_worker,
    top_achievements,
)
from gh_wrapped.models import Achievement


# =============================================================================
# Share text and links
# =============================================================================

class TestShare:
    """Tests for share text and share URLs."""

    def test_share_text(self, stats):
        """Headline numbers, archetype and hashtags."""
        text = Exporter(stats).share_text()

        assert text.startswith("🚀 My GitHub Wrapped 2024!")
        assert "📊 12 commits" in text
        assert "⭐ 125 stars earned" in text
        assert "🔥 10-day streak" in text
        assert "💻 The Consistent Coder" in text
        assert "🏆 4 achievements unlocked" in text
        assert "Top language: Python" in text
        assert text.endswith("#GitHubWrapped #DevLife")

    def test_share_text_without_languages(self, stats):
        """A placeholder when no language is known."""
        stats.top_languages = []
        assert "Top language: various languages" in Exporter(stats).share_text()

    def test_twitter_url(self, stats):
        """The tweet text and project URL are percent-encoded."""
        exporter = Exporter(stats)
        url = exporter.twitter_share_url()
        parsed = urlparse(url)
        query = parse_qs(parsed.query)

        assert url.startswith("https://twitter.com/intent/tweet?text=")
        assert query["text"] == [exporter.share_text()]
        assert query["url"][0].startswith("https://")
        assert " " not in url and "#" not in url

    def test_linkedin_url(self, stats):
        """LinkedIn only takes the URL."""
        url = Exporter(stats).linkedin_share_url()
        assert url.startswith("https://www.linkedin.com/sharing/share-offsite/?url=https%3A%2F%2F")

    def test_save_share_links(self, stats, tmp_path):
        """The links file holds the text and both URLs."""
        exporter = Exporter(stats, output_dir=tmp_path)
        path = exporter.save_share_links()

        content = path.read_text(encoding="utf-8")
        assert path.parent == tmp_path
        assert content.startswith("GitHub Wrapped 2024 - Share Links")
        assert exporter.twitter_share_url() in content
        assert exporter.linkedin_share_url() in content


# =============================================================================
# JSON and SVG
# =============================================================================

class TestFileExports:
    """Tests for JSON and SVG export."""

    def test_save_json(self, stats, tmp_path):
        """JSON is the stats dict, pretty-printed with emoji kept."""
        path = Exporter(stats, output_dir=tmp_path).save_json()

        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)
        assert data["user"]["login"] == "octocat"
        assert data["score"] == 652
        assert "💻" in raw
        assert raw.startswith('{\n  "user"')

    def test_save_json_explicit_path(self, stats, tmp_path):
        """An explicit path wins over the output directory."""
        target = tmp_path / "nested.json"
        assert Exporter(stats, output_dir=Path("/nonexistent")).save_json(target) == target
        assert target.exists()

    def test_export_svg(self, stats, tmp_path):
        """The SVG card carries the headline numbers and badges."""
        path = Exporter(stats, output_dir=tmp_path).export_svg()

        svg = path.read_text(encoding="utf-8")
        assert path == tmp_path / "gh-wrapped.svg"
        assert "<svg" in svg
        assert "GITHUB WRAPPED" in svg
        assert "@octocat" in svg
        assert "10 days" in svg
        assert "RISING STAR" in svg
        assert "ORIGIN" in svg
        assert "#00FF41" in svg

    def test_export_svg_unwritable(self, stats, tmp_path):
        """Write failures become ExportError."""
        target = tmp_path / "missing-dir" / "card.svg"
        with pytest.raises(ExportError, match="Could not write"):
            Exporter(stats).export_svg(target)

    def test_top_achievements_rarest_first(self):
        """Badges are ordered by rarity, then catalog order."""
        achievements = [
            Achievement("a", "A", "", "", "common"),
            Achievement("b", "B", "", "", "mythic"),
            Achievement("c", "C", "", "", "rare"),
            Achievement("d", "D", "", "", "mythic"),
        ]
        assert [a.id for a in top_achievements(achievements)] == ["b", "d", "c"]


# =============================================================================
# HTML card and avatar
# =============================================================================

class TestCardHtml:
    """Tests for the HTML card used for PNG export."""

    def test_render(self, stats):
        """Stats are filled into the template."""
        html = render_card_html(stats)

        assert 'id="wrapped-card"' in html
        assert "@octocat" in html
        assert "2024" in html
        assert "RISING STAR" in html
        assert "ORIGIN" in html
        assert "<img" not in html

    def test_render_with_avatar(self, stats):
        """An avatar data URI becomes an inline image."""
        html = render_card_html(stats, "data:image/png;base64,AAAA")
        assert 'src="data:image/png;base64,AAAA"' in html

    def test_values_escaped(self, stats):
        """User-controlled values cannot inject markup."""
        stats.user.login = "<script>"
        html = render_card_html(stats)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_avatar_data_uri(self):
        """Image bytes are base64 encoded with their content type."""
        response = make_response(headers={"Content-Type": "image/jpeg; charset=binary"})
        response.content = b"\xff\xd8"
        with patch("gh_wrapped.export.requests.get", return_value=response):
            assert fetch_avatar_data_uri("https://a.example/1") == "data:image/jpeg;base64,/9g="

    def test_avatar_failure(self):
        """A failed download exports without an avatar."""
        with patch("gh_wrapped.export.requests.get", side_effect=requests.Timeout("slow")):
            assert fetch_avatar_data_uri("https://a.example/1") == ""

    def test_no_avatar_url(self):
        """No URL means no request."""
        with patch("gh_wrapped.export.requests.get") as mock_get:
            assert fetch_avatar_data_uri("") == ""
        mock_get.assert_not_called()


# =============================================================================
# PNG worker
# =============================================================================

def fake_worker(result=None, stderr=""):
    """subprocess.run stand-in that writes a worker result file."""

    def run(cmd, **kwargs):
        input_file, output_file = Path(cmd[-2]), Path(cmd[-1])
        assert json.loads(input_file.read_text(encoding="utf-8"))["width"] == 750
        if result is not None:
            output_file.write_text(json.dumps(result), encoding="utf-8")
        return MagicMock(returncode=0 if result and result.get("success") else 1, stderr=stderr)

    return run


class TestPngExport:
    """Tests for export_png() and run_export_worker()."""

    def test_success(self, stats, tmp_path):
        """The worker's reported path is returned."""
        target = tmp_path / "card.png"
        worker = fake_worker({"success": True, "path": str(target)})
        with patch("gh_wrapped.export.ensure_browser") as mock_ensure, \
             patch("gh_wrapped.export.fetch_avatar_data_uri", return_value=""), \
             patch("gh_wrapped.export.subprocess.run", side_effect=worker) as mock_run:
            assert Exporter(stats).export_png(target) == target

        mock_ensure.assert_called_once_with(None)

        cmd = mock_run.call_args.args[0]
        assert cmd[1:3] == ["-m", "gh_wrapped.export_worker"]

    def test_worker_error(self):
        """A reported failure becomes ExportError with the worker's message."""
        worker = fake_worker({"success": False, "error": "Chromium missing"})
        with patch("gh_wrapped.export.subprocess.run", side_effect=worker):
            with pytest.raises(ExportError, match="Chromium missing"):
                run_export_worker({"width": 750})

    def test_worker_crash(self):
        """No result file means the worker crashed."""
        worker = fake_worker(None, stderr="Traceback...\nImportError: boom\n")
        with patch("gh_wrapped.export.subprocess.run", side_effect=worker):
            with pytest.raises(ExportError, match="ImportError: boom"):
                run_export_worker({"width": 750})

    def test_timeout(self):
        """A hung worker is reported."""
        error = subprocess.TimeoutExpired(cmd="python", timeout=1)
        with patch("gh_wrapped.export.subprocess.run", side_effect=error):
            with pytest.raises(ExportError, match="timed out"):
                run_export_worker({"width": 750}, timeout=1)

    def test_workdir_removed(self):
        """The temporary job directory is cleaned up."""
        seen = []

        def run(cmd, **kwargs):
            seen.append(Path(cmd[-1]).parent)
            Path(cmd[-1]).write_text('{"success": true, "path": "x.png"}', encoding="utf-8")
            return MagicMock(stderr="")

        with patch("gh_wrapped.export.subprocess.run", side_effect=run):
            run_export_worker({})
        assert not seen[0].exists()


class TestEnsureBrowser:
    """Tests for the one-time Chromium install before PNG export."""

    @pytest.fixture(autouse=True)
    def fresh_process(self, monkeypatch):
        monkeypatch.setattr(export, "_browser_ready", False)

    def test_already_installed(self):
        """Only the check runs when Chromium is present."""
        checked = MagicMock(returncode=0)
        with patch("gh_wrapped.export.subprocess.run", return_value=checked) as mock_run:
            assert ensure_browser() is False

        cmd = mock_run.call_args.args[0]
        assert cmd[1:] == ["-m", "gh_wrapped.export_worker", "--check"]

    def test_installs_once(self):
        """A missing browser is installed, and later calls skip both steps."""
        messages = []
        with patch(
            "gh_wrapped.export.subprocess.run",
            side_effect=[MagicMock(returncode=1), MagicMock(returncode=0)],
        ) as mock_run:
            assert ensure_browser(messages.append, timeout=60) is True
            assert ensure_browser() is False

        assert mock_run.call_count == 2
        install = mock_run.call_args_list[1]
        assert install.args[0][1:] == ["-m", "playwright", "install", "chromium"]
        assert install.kwargs["timeout"] == 60
        assert install.kwargs["check"] is True
        assert any("one-time" in message for message in messages)

    def test_install_failure(self):
        """A failed download explains how to install by hand."""
        failure = subprocess.CalledProcessError(
            1, "playwright", stderr="Download failed: ECONNRESET\n"
        )
        with patch(
            "gh_wrapped.export.subprocess.run",
            side_effect=[MagicMock(returncode=1), failure],
        ):
            with pytest.raises(ExportError) as exc_info:
                ensure_browser()

        message = str(exc_info.value)
        assert "Chromium installation failed" in message
        assert "playwright install chromium" in message
        assert "ECONNRESET" in message
        assert export._browser_ready is False

    def test_install_timeout(self):
        """A hung download is reported."""
        timeout = subprocess.TimeoutExpired(cmd="playwright", timeout=5)
        with patch(
            "gh_wrapped.export.subprocess.run",
            side_effect=[MagicMock(returncode=1), timeout],
        ):
            with pytest.raises(ExportError, match="timed out after 5 seconds"):
                ensure_browser(timeout=5)

    def test_check_failure_means_missing(self):
        """A check that cannot run is treated as no browser."""
        with patch("gh_wrapped.export.subprocess.run", side_effect=OSError("no python")):
            assert browser_installed() is False


class TestExportWorker:
    """Tests for the worker process entry point."""

    def test_bad_arguments(self):
        """Wrong argument count is a usage error."""
        assert export_worker.main([]) == 2

    @pytest.mark.parametrize("installed,code", [(True, 0), (False, 1)])
    def test_check(self, installed, code):
        """--check reports whether Chromium is on disk."""
        with patch.object(export_worker, "browser_installed", return_value=installed):
            assert export_worker.main(["--check"]) == code

    def test_success(self, tmp_path):
        """The job is rendered and the input file removed."""
        input_file, output_file = tmp_path / "in.json", tmp_path / "out.json"
        input_file.write_text(json.dumps({"path": "card.png"}), encoding="utf-8")

        with patch.object(export_worker, "render_png", return_value=Path("card.png")):
            assert export_worker.main([str(input_file), str(output_file)]) == 0

        assert json.loads(output_file.read_text()) == {"success": True, "path": "card.png"}
        assert not input_file.exists()

    def test_missing_browser(self, tmp_path):
        """A missing Chromium gets an install hint."""
        input_file, output_file = tmp_path / "in.json", tmp_path / "out.json"
        input_file.write_text("{}", encoding="utf-8")
        error = export_worker.PlaywrightError("Executable doesn't exist at /x/chrome")

        with patch.object(export_worker, "render_png", side_effect=error):
            assert export_worker.main([str(input_file), str(output_file)]) == 1

        result = json.loads(output_file.read_text())
        assert result["success"] is False
        assert "playwright install chromium" in result["error"]

    def test_missing_input(self, tmp_path):
        """An unreadable job is reported, not raised."""
        output_file = tmp_path / "out.json"
        assert export_worker.main([str(tmp_path / "nope.json"), str(output_file)]) == 1
        assert json.loads(output_file.read_text())["success"] is False


class TestOpenPath:
    """Tests for open_path()."""

    def test_launch(self):
        """click.launch is used for files and URLs."""
        with patch("gh_wrapped.export.click.launch", return_value=0) as mock_launch:
            assert open_path(Path("card.png")) is True
        mock_launch.assert_called_once_with("card.png")

    def test_launch_failure(self):
        """Launcher errors are logged, not raised."""
        with patch("gh_wrapped.export.click.launch", side_effect=OSError("no display")):
            assert open_path("https://example.com") is False
