"""
Tests for the thumbnail engines.

External binaries are never executed: the convert and epeg engines get a
mocked CommandRunner.
"""

from unittest.mock import Mock, patch

import pytest
from PIL import Image, UnidentifiedImageError

from mediaboard.core.config.models import ThumbnailConfig
from mediaboard.core.exceptions import EngineUnavailableError
from mediaboard.processing.commands import CommandResult, CommandRunner
from mediaboard.processing.engines import (
    ENGINES,
    ConvertEngine,
    EngineResult,
    EngineStatus,
    EpegEngine,
    GDEngine,
    create_engine,
    read_image_header,
)


@pytest.fixture
def runner():
    mock = Mock(spec=CommandRunner)
    mock.timeout = 60.0
    mock.run.return_value = CommandResult(returncode=0)
    return mock


class TestEngineResult:

    def test_truthiness_follows_status(self):
        assert EngineResult(EngineStatus.OK)
        assert not EngineResult(EngineStatus.PROCESS_FAILED)
        assert not EngineResult(EngineStatus.ENGINE_UNAVAILABLE)
        assert not EngineResult(EngineStatus.UNSUPPORTED_INPUT)


class TestCreateEngine:

    def test_closed_set(self):
        assert set(ENGINES) == {"gd", "convert", "epeg"}

    @pytest.mark.parametrize("name,expected", [
        ("gd", GDEngine),
        ("convert", ConvertEngine),
        ("EPEG", EpegEngine),
    ])
    def test_known_engines(self, name, expected):
        assert isinstance(create_engine(name), expected)

    def test_unknown_falls_back_to_gd(self):
        assert isinstance(create_engine("imlib2"), GDEngine)
        assert isinstance(create_engine(""), GDEngine)

    def test_config_is_passed(self):
        config = ThumbnailConfig(quality=40)
        assert create_engine("gd", config).config.quality == 40


class TestReadImageHeader:

    def test_format_and_size(self, sample_jpeg):
        assert read_image_header(sample_jpeg) == ("JPEG", (320, 240))

    def test_oversized_image_is_identified(self, huge_png):
        limit = Image.MAX_IMAGE_PIXELS

        assert read_image_header(huge_png) == ("PNG", (20000, 20000))
        assert Image.MAX_IMAGE_PIXELS == limit

    def test_limit_restored_after_failure(self, temp_dir):
        limit = Image.MAX_IMAGE_PIXELS
        garbage = temp_dir / "garbage.png"
        garbage.write_bytes(b"not an image")

        with pytest.raises(UnidentifiedImageError):
            read_image_header(garbage)

        assert Image.MAX_IMAGE_PIXELS == limit


class TestGDEngine:
    """Pillow rendering."""

    def test_renders_jpeg_thumbnail(self, sample_jpeg, temp_dir):
        dst = temp_dir / "thumbs" / "out"

        result = GDEngine().make_thumb(sample_jpeg, dst)

        assert result.status is EngineStatus.OK
        assert result.output == dst
        with Image.open(dst) as thumb:
            assert thumb.format == "JPEG"
            assert thumb.size == (192, 144)

    def test_flattens_transparency(self, make_image, temp_dir):
        src = make_image("alpha.png", size=(100, 100), fmt="PNG", color=(0, 255, 0, 0), mode="RGBA")
        dst = temp_dir / "alpha-thumb"

        assert GDEngine().make_thumb(src, dst)

        with Image.open(dst) as thumb:
            assert thumb.mode == "RGB"
            r, g, b = thumb.getpixel((50, 50))
            # fully transparent pixels end up white
            assert min(r, g, b) > 240

    def test_extreme_ratio_is_cropped(self, make_image, temp_dir):
        src = make_image("banner.png", size=(1000, 10), fmt="PNG")
        dst = temp_dir / "banner-thumb"

        GDEngine().make_thumb(src, dst)

        with Image.open(dst) as thumb:
            assert thumb.size == (50, 10)

    def test_memory_ceiling_writes_placeholder_without_decoding(self, sample_jpeg, temp_dir):
        """Images estimated to exceed memory_limit are never decoded."""
        engine = GDEngine(ThumbnailConfig(memory_limit=1024))
        dst = temp_dir / "placeholder"

        with patch.object(GDEngine, "_render") as render:
            result = engine.make_thumb(sample_jpeg, dst)

        render.assert_not_called()
        assert result.status is EngineStatus.OK
        assert result.message == "placeholder"
        with Image.open(dst) as thumb:
            assert thumb.size == (192, 64)

    def test_oversized_header_writes_placeholder(self, huge_png, temp_dir):
        dst = temp_dir / "huge-thumb"

        result = GDEngine().make_thumb(huge_png, dst)

        assert result.status is EngineStatus.OK
        assert result.message == "placeholder"
        with Image.open(dst) as thumb:
            assert thumb.size == (192, 64)

    def test_placeholder_height_follows_small_box(self, sample_jpeg, temp_dir):
        engine = GDEngine(ThumbnailConfig(memory_limit=1, width=100, height=40))
        dst = temp_dir / "placeholder"

        engine.make_thumb(sample_jpeg, dst)

        with Image.open(dst) as thumb:
            assert thumb.size == (100, 40)

    def test_unreadable_input(self, temp_dir):
        src = temp_dir / "garbage.png"
        src.write_bytes(b"not an image")

        result = GDEngine().make_thumb(src, temp_dir / "out")

        assert result.status is EngineStatus.UNSUPPORTED_INPUT
        assert not (temp_dir / "out").exists()

    def test_quality_is_applied(self, sample_jpeg, temp_dir):
        low, high = temp_dir / "low", temp_dir / "high"
        noisy = Image.new("RGB", (320, 240))
        # a noisy image makes the size difference reliable
        noisy.putdata([((x * 7) % 256, (x * 13) % 256, (x * 17) % 256) for x in range(320 * 240)])
        noisy.save(sample_jpeg, "JPEG", quality=95)

        GDEngine(ThumbnailConfig(quality=10)).make_thumb(sample_jpeg, low)
        GDEngine(ThumbnailConfig(quality=95)).make_thumb(sample_jpeg, high)

        assert low.stat().st_size < high.stat().st_size


class TestConvertEngine:
    """ImageMagick command construction and failure handling."""

    def test_command_line(self, runner, sample_jpeg, temp_dir):
        dst = temp_dir / "out"
        engine = ConvertEngine(ThumbnailConfig(quality=80), runner)

        result = engine.make_thumb(sample_jpeg, dst)

        assert result.status is EngineStatus.OK
        runner.run.assert_called_once_with("convert", [
            f"{sample_jpeg}[0]",
            "-extent", "320x240",
            "-flatten",
            "-strip",
            "-thumbnail", "192x192",
            "-quality", "80",
            f"jpg:{dst}",
        ])

    def test_extent_is_clamped(self, runner, make_image, temp_dir):
        src = make_image("banner.png", size=(1000, 10), fmt="PNG")

        ConvertEngine(runner=runner).make_thumb(src, temp_dir / "out")

        args = runner.run.call_args[0][1]
        assert args[args.index("-extent") + 1] == "50x10"

    def test_nonzero_exit_is_process_failure(self, runner, sample_jpeg, temp_dir):
        """A failing convert is reported instead of passing as success."""
        runner.run.return_value = CommandResult(returncode=1, stderr="convert: no decode delegate")

        result = ConvertEngine(runner=runner).make_thumb(sample_jpeg, temp_dir / "out")

        assert result.status is EngineStatus.PROCESS_FAILED
        assert "no decode delegate" in result.message

    def test_timeout_is_process_failure(self, runner, sample_jpeg, temp_dir):
        runner.run.return_value = CommandResult(returncode=-1, timed_out=True)

        result = ConvertEngine(runner=runner).make_thumb(sample_jpeg, temp_dir / "out")

        assert result.status is EngineStatus.PROCESS_FAILED
        assert "timed out" in result.message

    def test_missing_binary(self, runner, sample_jpeg, temp_dir):
        runner.run.side_effect = EngineUnavailableError("convert")

        result = ConvertEngine(runner=runner).make_thumb(sample_jpeg, temp_dir / "out")

        assert result.status is EngineStatus.ENGINE_UNAVAILABLE

    def test_optimize_runs_jpegoptim(self, runner, sample_jpeg, temp_dir):
        dst = temp_dir / "out"
        engine = ConvertEngine(ThumbnailConfig(optimize=True, jpegoptim_path="/opt/jpegoptim"), runner)

        engine.make_thumb(sample_jpeg, dst)

        assert runner.run.call_count == 2
        assert runner.run.call_args_list[1][0] == ("/opt/jpegoptim", [dst])

    def test_optimize_failure_is_not_fatal(self, runner, sample_jpeg, temp_dir):
        runner.run.side_effect = [CommandResult(returncode=0), CommandResult(returncode=2)]
        engine = ConvertEngine(ThumbnailConfig(optimize=True), runner)

        assert engine.make_thumb(sample_jpeg, temp_dir / "out")

    def test_optimize_missing_is_not_fatal(self, runner, sample_jpeg, temp_dir):
        runner.run.side_effect = [CommandResult(returncode=0), EngineUnavailableError("jpegoptim")]
        engine = ConvertEngine(ThumbnailConfig(optimize=True), runner)

        assert engine.make_thumb(sample_jpeg, temp_dir / "out")


class TestEpegEngine:

    def test_jpeg_only(self, runner, sample_png, temp_dir):
        result = EpegEngine(runner=runner).make_thumb(sample_png, temp_dir / "out")

        assert result.status is EngineStatus.UNSUPPORTED_INPUT
        runner.run.assert_not_called()

    def test_command_line(self, runner, sample_jpeg, temp_dir):
        dst = temp_dir / "out"

        result = EpegEngine(ThumbnailConfig(width=150), runner).make_thumb(sample_jpeg, dst)

        assert result.ok
        runner.run.assert_called_once_with(
            "epeg", [sample_jpeg, "-c", "Created by EPEG", "--max", "150", dst]
        )

    def test_failure(self, runner, sample_jpeg, temp_dir):
        runner.run.return_value = CommandResult(returncode=3)

        result = EpegEngine(runner=runner).make_thumb(sample_jpeg, temp_dir / "out")

        assert result.status is EngineStatus.PROCESS_FAILED
