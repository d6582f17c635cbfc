"""Single-flight coordination of camera questions and frame analysis."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from models.errors import CaptureError, ConfigurationMissingError, NoDeviceError
from models.session_models import AnalysisState, DedupWindow, EchoGuard, PendingAnalysis
from services.capture.capture_source import CaptureSource
from services.capture.frame_capture import FrameCapture
from services.providers.vision_analyzer import VisionAnalyzer
from services.realtime.echo_filter import EchoFilter
from services.realtime.intent_classifier import IntentClassifier, KeywordIntentClassifier
from services.realtime.response_speaker import ResponseSpeaker

LOGGER = logging.getLogger(__name__)

DEDUP_WINDOW_SECONDS = 5.0
RETRY_WINDOW_SECONDS = 2.0

NO_DEVICE_APOLOGY = (
	"Oh no, I can't find a camera to look through right now! "
	"Could you check that one is connected and that I'm allowed to use it?"
)
CAPTURE_APOLOGY = "Oops, I couldn't get a clear look just now. Give me a second and ask me again!"
ANALYSIS_APOLOGY = "Sorry, I had a little trouble figuring out what I'm looking at. Could you ask me again?"
SETUP_APOLOGY = "My eyes aren't set up yet, so I can't look at anything right now. Please check the configuration."


class AnalysisRequestCoordinator:
	"""Turn qualifying utterances into at most one frame analysis at a time.

	`handle_utterance` runs every gate synchronously and records the pending
	analysis and dedup window before anything is awaited, so events delivered
	while an analysis is in flight are dropped rather than queued.
	"""

	def __init__(
		self,
		speaker: ResponseSpeaker,
		analyzer: VisionAnalyzer,
		guard: EchoGuard,
		frame_capture: Optional[FrameCapture] = None,
		intent_classifier: Optional[IntentClassifier] = None,
		echo_filter: Optional[EchoFilter] = None,
		clock: Callable[[], float] = time.monotonic,
		dedup_seconds: float = DEDUP_WINDOW_SECONDS,
		retry_seconds: float = RETRY_WINDOW_SECONDS,
	) -> None:
		self.speaker = speaker
		self.analyzer = analyzer
		self.guard = guard
		self.frame_capture = frame_capture or FrameCapture()
		self.intent_classifier = intent_classifier or KeywordIntentClassifier()
		self.echo_filter = echo_filter or EchoFilter()
		self.clock = clock
		self.dedup_seconds = dedup_seconds
		self.retry_seconds = retry_seconds

		self.source: Optional[CaptureSource] = None
		self.pending: Optional[PendingAnalysis] = None
		self.dedup = DedupWindow()
		self.current_task: Optional[asyncio.Task] = None

	@property
	def camera_active(self) -> bool:
		return self.source is not None and self.source.active

	def attach_source(self, source: CaptureSource) -> None:
		self.source = source

	def detach_source(self) -> None:
		self.source = None

	def handle_utterance(self, text: str, is_auto: bool = False) -> Optional[asyncio.Task]:
		"""Start an analysis for `text` if every gate passes.

		Returns the running task, or None when the utterance was rejected.
		"""
		question = (text or "").strip()
		if not self.camera_active:
			return None
		if self.pending is not None:
			LOGGER.debug("Analysis already in flight; dropping %r", question)
			return None

		now = self.clock()
		if not is_auto:
			if not question:
				return None
			if self.echo_filter.is_echo(question, self.guard):
				LOGGER.warning("Ignoring transcription that looks like the avatar's own speech")
				return None
			if self.dedup.blocks(question, now):
				LOGGER.info("Ignoring repeated question %r", question)
				return None
			if not self.intent_classifier.is_visual_query(question):
				return None

		pending = PendingAnalysis(question=question, started_at=now, is_auto=is_auto)
		self.pending = pending
		self.dedup.record(question, now, self.dedup_seconds)
		LOGGER.info("Starting %s analysis for %r", "auto" if is_auto else "user", question)

		self.current_task = asyncio.get_running_loop().create_task(self._run(pending, self.source))
		return self.current_task

	async def _run(self, pending: PendingAnalysis, source: CaptureSource) -> None:
		try:
			try:
				image = await self.frame_capture.capture(source)
			except NoDeviceError as exc:
				LOGGER.warning("Capture failed, no device: %s", exc)
				await self._fail(pending, NO_DEVICE_APOLOGY)
				return
			except CaptureError as exc:
				LOGGER.warning("Capture failed: %s", exc)
				await self._fail(pending, CAPTURE_APOLOGY)
				return
			except Exception:
				LOGGER.exception("Unexpected capture failure")
				await self._fail(pending, CAPTURE_APOLOGY)
				return

			try:
				analysis = await self.analyzer.analyze_image(image.data, image.mime_type, pending.question)
			except ConfigurationMissingError as exc:
				LOGGER.error("Vision provider not configured: %s", exc)
				await self._fail(pending, SETUP_APOLOGY, shorten=False)
				return
			except Exception as exc:
				LOGGER.error("Vision analysis failed: %s", exc)
				await self._fail(pending, ANALYSIS_APOLOGY)
				return

			pending.state = AnalysisState.DONE
			LOGGER.info("Analysis finished in %.3fs", self.clock() - pending.started_at)
			await self._dispatch(analysis)
		finally:
			if self.pending is pending:
				self.pending = None

	async def _fail(self, pending: PendingAnalysis, apology: str, shorten: bool = True) -> None:
		pending.state = AnalysisState.FAILED
		if shorten:
			self.dedup.shorten(self.clock(), self.retry_seconds)
		await self._dispatch(apology)

	async def _dispatch(self, text: str) -> None:
		try:
			await self.speaker.speak(text)
		except Exception:
			LOGGER.exception("Failed to dispatch spoken response")

