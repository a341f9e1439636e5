"""Unit tests for DeviceAcquisition."""

import pytest


class TestDeviceAcquisition:
    """Test the hand-off between the worker thread and the event loop."""

    def test_open_returns_device(self, fake_device):
        from color_sampler.workflow.acquisition import DeviceAcquisition

        acquisition = DeviceAcquisition(fake_device)
        assert acquisition.open() is fake_device
        assert fake_device.is_open
        assert not acquisition.abandoned

    def test_open_after_abandon_releases_device(self, fake_device):
        from color_sampler.errors import DeviceUnavailable
        from color_sampler.workflow.acquisition import DeviceAcquisition

        acquisition = DeviceAcquisition(fake_device)
        acquisition.abandon()

        with pytest.raises(DeviceUnavailable):
            acquisition.open()
        assert fake_device.close_calls == 1
        assert not fake_device.is_open

    def test_abandon_after_open_releases_device(self, fake_device):
        from color_sampler.workflow.acquisition import DeviceAcquisition

        acquisition = DeviceAcquisition(fake_device)
        acquisition.open()
        acquisition.abandon()

        assert acquisition.abandoned
        assert fake_device.close_calls == 1

    def test_abandon_before_open_does_not_close(self, fake_device):
        from color_sampler.workflow.acquisition import DeviceAcquisition

        DeviceAcquisition(fake_device).abandon()
        assert fake_device.close_calls == 0
