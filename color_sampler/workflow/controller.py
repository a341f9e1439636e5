"""Capture workflow - camera/upload acquisition, calibration and sampling."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Callable, Optional

from ..capture.camera import Camera, CaptureDevice
from ..capture.frame import SOURCE_CAMERA, RasterSurface
from ..capture.image_source import ImageInput, decode_image_async
from ..capture.sampler import PixelSampler
from ..color.convert import parse_hex, to_hex
from ..color.white_balance import WhiteBalanceCalibrator
from ..core.config import SamplerConfig
from ..core.logging_utils import LoggerLike, ensure_structured_logger
from ..errors import CaptureErrorReason, DeviceUnavailable, InvalidTransition, OutOfBounds
from ..pointer import PointerPhase, PointerSample, Rect
from .acquisition import DeviceAcquisition
from .state import IMAGE_PHASES, AcquireResult, CapturePhase, Failed, Preview, Ready, WorkflowState

DeviceFactory = Callable[[], CaptureDevice]
ColorCallback = Callable[[str], None]
ErrorCallback = Callable[[CaptureErrorReason], None]
StateCallback = Callable[[WorkflowState], None]

RELEASE_TIMEOUT_S = 3.0


def _consume_result(future: asyncio.Future) -> None:
    # An open abandoned by its caller still finishes in the worker thread.
    if not future.cancelled():
        future.exception()


class CaptureWorkflow:
    """Owns the capture session: device, raster surface and calibration.

    Phases run idle -> streaming -> captured -> (calibrating) -> sampling, and
    ``commit`` returns to idle. Live previews and pointer-up selections are
    reported to color subscribers as hex; ``commit`` reports the final
    selection to result subscribers. Device failures go to error subscribers
    with a coarse reason and never raise out of ``start_camera`` or
    ``capture_still``.

    The capture device is held only while streaming and is released on every
    way out of that phase, including cancellation of a pending open.
    """

    def __init__(
        self,
        device_factory: Optional[DeviceFactory] = None,
        *,
        config: Optional[SamplerConfig] = None,
        logger: LoggerLike = None,
    ) -> None:
        self._config = config or SamplerConfig()
        self._logger = ensure_structured_logger(logger, fallback_name=__name__)
        self._device_factory = device_factory or self._default_device_factory
        self._state = WorkflowState()
        self._calibrator = WhiteBalanceCalibrator(
            min_reference_level=self._config.calibration.min_reference_level,
            logger=self._logger.getChild("calibration"),
        )
        self._sampler: Optional[PixelSampler] = None
        self._device: Optional[CaptureDevice] = None
        self._acquire_task: Optional[asyncio.Task] = None

        self._color_subscribers: list[ColorCallback] = []
        self._result_subscribers: list[ColorCallback] = []
        self._error_subscribers: list[ErrorCallback] = []
        self._state_subscribers: list[StateCallback] = []

    def _default_device_factory(self) -> CaptureDevice:
        return Camera(self._config.camera.device, self._config.camera.resolution)

    async def __aenter__(self) -> "CaptureWorkflow":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Observers

    def subscribe_color(self, callback: ColorCallback) -> None:
        """Live preview and pointer-up selections (``on_color_change``)."""
        self._color_subscribers.append(callback)

    def subscribe_result(self, callback: ColorCallback) -> None:
        """Final color emitted by ``commit``."""
        self._result_subscribers.append(callback)

    def subscribe_error(self, callback: ErrorCallback) -> None:
        """Device acquisition failures (``on_capture_error``)."""
        self._error_subscribers.append(callback)

    def subscribe_state(self, callback: StateCallback) -> None:
        self._state_subscribers.append(callback)
        callback(self._state)

    def unsubscribe(self, callback: Callable) -> None:
        for subscribers in (
            self._color_subscribers,
            self._result_subscribers,
            self._error_subscribers,
            self._state_subscribers,
        ):
            if callback in subscribers:
                subscribers.remove(callback)

    def _emit(self, subscribers: list, value: object, label: str) -> None:
        for sub in list(subscribers):
            try:
                sub(value)
            except Exception as e:
                self._logger.error("%s subscriber error: %s", label, e)

    def _notify(self) -> None:
        self._emit(self._state_subscribers, self._state, "State")

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def state(self) -> WorkflowState:
        """Current workflow state. Treat as read-only."""
        return self._state

    @property
    def phase(self) -> CapturePhase:
        return self._state.phase

    @property
    def calibrator(self) -> WhiteBalanceCalibrator:
        return self._calibrator

    @property
    def device(self) -> Optional[CaptureDevice]:
        return self._device

    # ------------------------------------------------------------------
    # Internal helpers

    def _require(self, operation: str, *phases: CapturePhase) -> None:
        if self._state.phase not in phases:
            self._logger.warning("Cannot %s: phase=%s", operation, self._state.phase.name)
            raise InvalidTransition(operation, self._state.phase.name)

    def _set_phase(self, phase: CapturePhase) -> None:
        if phase is not self._state.phase:
            self._logger.debug("Phase %s -> %s", self._state.phase.name, phase.name)
        self._state.phase = phase
        self._state.preview = None

    def _clear_calibration(self) -> None:
        self._calibrator.clear()
        self._state.white_reference = None

    def _hold_surface(self, surface: RasterSurface) -> None:
        self._clear_calibration()
        self._state.surface = surface
        self._state.selected_hex = None
        self._sampler = PixelSampler(surface)

    def _drop_surface(self) -> None:
        self._state.surface = None
        self._state.selected_hex = None
        self._sampler = None

    def _report_error(self, reason: CaptureErrorReason, detail: str) -> None:
        self._state.error = detail or reason.value
        self._logger.warning("Capture error: %s (%s)", reason.value, detail)
        self._emit(self._error_subscribers, reason, "Error")

    async def _release_device(self) -> None:
        """Release the held device, if any. Always clears the handle."""
        device, self._device = self._device, None
        if device is None:
            return
        loop = asyncio.get_running_loop()
        try:
            await asyncio.wait_for(loop.run_in_executor(None, device.close), timeout=RELEASE_TIMEOUT_S)
        except asyncio.TimeoutError:
            self._logger.warning("Device release timed out after %.0fs", RELEASE_TIMEOUT_S)
        except Exception as e:
            self._logger.error("Device release failed: %s", e)

    async def _acquire(self, acquisition: DeviceAcquisition) -> AcquireResult:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, acquisition.open)
        future.add_done_callback(_consume_result)
        try:
            device = await asyncio.wait_for(
                asyncio.shield(future),
                timeout=self._config.camera.open_timeout_s,
            )
        except asyncio.CancelledError:
            acquisition.abandon()
            raise
        except asyncio.TimeoutError:
            acquisition.abandon()
            return Failed(CaptureErrorReason.UNKNOWN, "timed out opening camera")
        except PermissionError as e:
            return Failed(CaptureErrorReason.PERMISSION_DENIED, str(e))
        except DeviceUnavailable as e:
            return Failed(e.reason, e.detail or "")
        except Exception as e:
            self._logger.error("Unexpected error opening camera: %s", e, exc_info=True)
            acquisition.abandon()
            return Failed(CaptureErrorReason.UNKNOWN, str(e))
        return Ready(device)

    # ------------------------------------------------------------------
    # Camera session

    async def start_camera(self) -> AcquireResult:
        """Open a capture device and enter STREAMING.

        Starting a new capture session discards the white reference. A still
        or upload already held stays visible until a new still replaces it.
        On failure the workflow reports the reason and stays idle.
        """
        if self._state.phase is CapturePhase.STREAMING or self._state.acquiring:
            self._logger.warning("Cannot start camera: phase=%s acquiring=%s", self._state.phase.name, self._state.acquiring)
            raise InvalidTransition("start camera", self._state.phase.name)

        await self._release_device()
        self._clear_calibration()
        self._state.calibration_armed = False
        self._state.error = ""
        self._state.acquiring = True
        self._notify()

        acquisition = DeviceAcquisition(self._device_factory())
        task = asyncio.get_running_loop().create_task(self._acquire(acquisition))
        self._acquire_task = task
        try:
            result = await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                task.cancel()
                raise
            result = Failed(CaptureErrorReason.UNKNOWN, "acquisition cancelled", cancelled=True)
        finally:
            if self._acquire_task is task:
                self._acquire_task = None
            self._state.acquiring = False

        if isinstance(result, Ready):
            self._device = result.value
            self._set_phase(CapturePhase.STREAMING)
            self._logger.info("Streaming started")
        elif result.cancelled:
            self._logger.info("Camera acquisition cancelled")
        else:
            self._set_phase(CapturePhase.IDLE)
            self._report_error(result.reason, result.detail)
        self._notify()
        return result

    async def stop_camera(self) -> None:
        """Stop streaming (or a pending open) and release the device."""
        task = self._acquire_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        await self._release_device()

        if self._state.phase is CapturePhase.STREAMING:
            self._set_phase(CapturePhase.CAPTURED if self._state.has_image else CapturePhase.IDLE)
            self._state.calibration_armed = False
            self._logger.info("Streaming stopped")
        self._notify()

    def arm_calibration(self, enabled: bool = True) -> None:
        """While streaming, send the next still straight into calibration."""
        self._require("arm calibration", CapturePhase.STREAMING)
        self._state.calibration_armed = enabled
        self._notify()

    async def capture_still(self) -> AcquireResult:
        """Grab one frame, release the device and hold the frame for sampling."""
        self._require("capture still", CapturePhase.STREAMING)
        device = self._device
        loop = asyncio.get_running_loop()

        result: AcquireResult
        try:
            if device is None:
                raise DeviceUnavailable(CaptureErrorReason.NO_DEVICE, "no device held")
            frame = await loop.run_in_executor(None, device.read_frame)
            result = Ready(RasterSurface.from_bgr(frame, source=SOURCE_CAMERA))
        except asyncio.CancelledError:
            self._state.calibration_armed = False
            self._set_phase(CapturePhase.CAPTURED if self._state.has_image else CapturePhase.IDLE)
            self._logger.info("Still capture cancelled")
            self._notify()
            raise
        except PermissionError as e:
            result = Failed(CaptureErrorReason.PERMISSION_DENIED, str(e))
        except DeviceUnavailable as e:
            result = Failed(e.reason, e.detail or "")
        except ValueError as e:
            result = Failed(CaptureErrorReason.UNKNOWN, str(e))
        except Exception as e:
            self._logger.error("Unexpected error reading frame: %s", e, exc_info=True)
            result = Failed(CaptureErrorReason.UNKNOWN, str(e))
        finally:
            await self._release_device()

        armed = self._state.calibration_armed
        self._state.calibration_armed = False

        if isinstance(result, Failed):
            self._set_phase(CapturePhase.IDLE)
            self._report_error(result.reason, result.detail)
            self._notify()
            return result

        surface = result.value
        self._hold_surface(surface)
        self._set_phase(CapturePhase.CALIBRATING if armed else CapturePhase.CAPTURED)
        self._logger.info("Captured still %dx%d (calibrate=%s)", surface.width, surface.height, armed)
        self._notify()
        return result

    # ------------------------------------------------------------------
    # Uploads

    def load_surface(self, surface: RasterSurface) -> None:
        """Hold an already decoded image. Resets calibration."""
        if self._state.phase is CapturePhase.STREAMING or self._state.acquiring:
            self._logger.warning("Cannot load image while streaming")
            raise InvalidTransition("load image", self._state.phase.name)
        self._hold_surface(surface)
        self._state.calibration_armed = False
        self._set_phase(CapturePhase.CAPTURED)
        self._logger.info("Loaded image %dx%d", surface.width, surface.height)
        self._notify()

    async def load_image(self, source: ImageInput) -> RasterSurface:
        """Decode an uploaded file off the event loop and hold it.

        Raises:
            ValueError: the data is not a readable image, or is truncated.
            OSError: the path cannot be opened.
        """
        if self._state.phase is CapturePhase.STREAMING or self._state.acquiring:
            await self.stop_camera()
        surface = await decode_image_async(source)
        self.load_surface(surface)
        return surface

    # ------------------------------------------------------------------
    # Calibration

    def begin_calibration(self) -> None:
        self._require("begin calibration", CapturePhase.CAPTURED, CapturePhase.SAMPLING, CapturePhase.CALIBRATING)
        self._set_phase(CapturePhase.CALIBRATING)
        self._notify()

    def cancel_calibration(self) -> None:
        """Leave calibration without a reference."""
        self._require("cancel calibration", CapturePhase.CALIBRATING)
        self._clear_calibration()
        self._set_phase(CapturePhase.SAMPLING)
        self._notify()

    def clear_white_reference(self) -> None:
        self._clear_calibration()
        self._notify()

    def begin_sampling(self) -> None:
        """Open the sampler on the held image."""
        if self._state.phase is CapturePhase.SAMPLING:
            return
        if self._state.phase not in (CapturePhase.IDLE, CapturePhase.CAPTURED) or not self._state.has_image:
            self._logger.warning("Cannot begin sampling: phase=%s", self._state.phase.name)
            raise InvalidTransition("begin sampling", self._state.phase.name)
        self._set_phase(CapturePhase.SAMPLING)
        self._notify()

    # ------------------------------------------------------------------
    # Pointer handling

    def handle_pointer(self, sample: PointerSample, display_rect: Rect) -> Optional[Preview]:
        """Sample, preview, calibrate or select depending on the pointer phase.

        Returns the preview after DOWN/MOVE, or None when the pointer is off
        the image, has left it, or has just been released.
        """
        phase = self._state.phase
        if phase not in IMAGE_PHASES or self._sampler is None:
            return None

        if sample.phase is PointerPhase.LEAVE:
            self._state.preview = None
            return None

        if sample.phase is PointerPhase.UP:
            return self._release_pointer()

        if phase is CapturePhase.CAPTURED:
            self._set_phase(CapturePhase.SAMPLING)
            self._notify()

        try:
            raw = self._sampler.sample(sample.x, sample.y, display_rect)
        except OutOfBounds:
            self._state.preview = None
            return None

        calibrating = self._state.phase is CapturePhase.CALIBRATING
        color = raw if calibrating else self._calibrator.correct(raw)
        preview = Preview(
            x=sample.x,
            y=sample.y,
            hex=to_hex(color),
            raw_hex=to_hex(raw),
            native=self._sampler.last_native or (0, 0),
        )
        self._state.preview = preview
        if not calibrating:
            self._emit(self._color_subscribers, preview.hex, "Color")
        return preview

    def _release_pointer(self) -> None:
        preview = self._state.preview
        self._state.preview = None
        if preview is None:
            return None

        if self._state.phase is CapturePhase.CALIBRATING:
            reference = self._calibrator.set_reference(parse_hex(preview.raw_hex))
            self._state.white_reference = reference
            self._set_phase(CapturePhase.SAMPLING)
            self._notify()
            return None

        self._state.selected_hex = preview.hex
        self._logger.debug("Selected #%s (raw #%s)", preview.hex, preview.raw_hex)
        self._emit(self._color_subscribers, preview.hex, "Color")
        self._notify()
        return None

    # ------------------------------------------------------------------
    # Completion

    def commit(self) -> Optional[str]:
        """Emit the selected color and return to IDLE.

        The image stays held so the sampler can be reopened.
        """
        if self._state.phase is CapturePhase.STREAMING or self._state.acquiring:
            self._logger.warning("Cannot commit while streaming")
            raise InvalidTransition("commit", self._state.phase.name)
        selected = self._state.selected_hex
        self._set_phase(CapturePhase.IDLE)
        if selected is not None:
            self._logger.info("Committed #%s", selected)
            self._emit(self._result_subscribers, selected, "Result")
        self._notify()
        return selected

    def reset(self) -> None:
        """Drop the image, white reference and selection."""
        if self._state.phase is CapturePhase.STREAMING or self._state.acquiring:
            self._logger.warning("Cannot reset while streaming")
            raise InvalidTransition("reset", self._state.phase.name)
        self._drop_surface()
        self._clear_calibration()
        self._state.calibration_armed = False
        self._set_phase(CapturePhase.IDLE)
        self._notify()

    async def close(self) -> None:
        """Release the device and drop all session state."""
        await self.stop_camera()
        self.reset()


__all__ = ["CaptureWorkflow", "DeviceFactory"]
