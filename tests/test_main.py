"""Tests for command line parsing and camera helpers."""

from unittest.mock import Mock

import numpy as np
import pytest

from identity_service.camera import _camera_source, frame_grabber
from identity_service.main import parse_args


class TestParseArgs:
    """Test cases for parse_args."""

    def test_default_command_is_serve(self):
        args = parse_args([])

        assert args.command == 'serve'
        assert args.debug is False

    def test_register(self):
        args = parse_args(['--debug', 'register', '--name', 'Alice'])

        assert args.command == 'register'
        assert args.name == 'Alice'
        assert args.debug is True

    def test_search_prefix_optional(self):
        assert parse_args(['search']).prefix == ''
        assert parse_args(['search', 'Al']).prefix == 'Al'

    def test_delete_requires_name(self):
        with pytest.raises(SystemExit):
            parse_args(['delete'])


class TestCameraHelpers:
    """Test cases for camera helpers."""

    def test_camera_source(self):
        assert _camera_source('0') == 0
        assert _camera_source('rtsp://cam/stream') == 'rtsp://cam/stream'

    def test_frame_grabber(self):
        frame = np.zeros((4, 4, 3), dtype=np.uint8)
        capture = Mock()
        capture.read.return_value = (True, frame)

        assert frame_grabber(capture)() is frame

        capture.read.return_value = (False, None)
        with pytest.raises(RuntimeError):
            frame_grabber(capture)()
