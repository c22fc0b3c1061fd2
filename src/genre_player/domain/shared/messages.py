"""Centralized message constants for error messages, validation, and log output."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"

    # Parameter Validation Errors
    INVALID_PARAMETER_RANGE = "Parameter '{parameter_id}' has min_value greater than max_value"
    PARAMETER_DEFAULT_OUT_OF_RANGE = "Parameter '{parameter_id}' default lies outside its range"
    NOT_AN_ADDITIONAL_PARAMETER = "Parameter '{parameter_id}' is not an additional parameter of the active genre"
    UNKNOWN_PARAMETER = "Unknown parameter '{parameter_id}' for the active genre"

    # Queue Errors
    QUEUE_INDEX_OUT_OF_RANGE = "Queue index {index} is outside a history of {length} tracks"
    QUEUE_DETACHED_HISTORY = "Queue has history but no current track"

    # Session Feedback
    GENRE_SWITCH_IN_PROGRESS = "A genre switch is in progress"
    NO_GENRE_SELECTED = "No genre selected"
    NEXT_TRACK_PREPARING = "Next track is being prepared"

    # Provider Errors
    PROVIDER_TIMEOUT = "Provider request timed out ({detail})"
    PROVIDER_HTTP_STATUS = "Provider returned HTTP {status}"
    PROVIDER_UNREACHABLE = "Provider unreachable ({detail})"
    PROVIDER_UNEXPECTED = "Unexpected provider error: {detail}"
    PROVIDER_NON_JSON = "Provider returned a non-JSON body"
    PROVIDER_MALFORMED_RESPONSE = "Provider response is not a JSON object"
    PROVIDER_MALFORMED_PAGE = "Provider search page has an unexpected shape"
    NO_PLAYABLE_PREVIEWS = "No playable previews for '{query}'"

    # Generation Errors
    MUSICGEN_URL_MISSING = "MusicGen endpoint URL is not configured"
    MUSICGEN_NOT_AUDIO = "MusicGen returned {content_type} instead of audio"
    MUSICGEN_EMPTY_AUDIO = "MusicGen returned an empty body"

    # Configuration Validation Errors
    INVALID_PROVIDER_URL = "Provider URL must start with http:// or https://, got {url}"
    INVALID_HTTP_STATUS = "Invalid HTTP status code: {status}"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Request Serializer
    SERIALIZER_ENQUEUED = "Enqueued request %s (%d pending)"
    SERIALIZER_JOB_STARTED = "Dispatching request %s (%d still pending)"
    SERIALIZER_JOB_SKIPPED = "Skipped request %s: cancelled before dispatch"
    SERIALIZER_JOB_WITHDRAWN = "Withdrew pending request %s"
    SERIALIZER_RESULT_DISCARDED = "Result of request %s will be discarded"
    SERIALIZER_CLOSED = "Request serializer closed"

    # Acquisition
    ACQUISITION_STARTED = "Acquisition %s started for genre %s"
    ACQUISITION_DISPATCHED = "Acquisition %s dispatched for genre %s with parameters %s"
    ACQUISITION_SUCCEEDED = "Acquisition %s for genre %s produced '%s'"
    ACQUISITION_FAILED = "Acquisition %s for genre %s failed (%s): %s"
    ACQUISITION_CANCELLED = "Cancelled acquisition %s for genre %s: %s"
    ACQUISITION_LATE_RESULT_DISCARDED = "Discarded late result of acquisition %s: %s"

    # Prefetch
    PREFETCH_TRIGGERED = "Prefetch triggered for '%s' with %.1fs remaining"
    PREFETCH_READY = "Prefetched next track '%s'"
    PREFETCH_CANCELLED = "Prefetch for %s cancelled: %s"
    PREFETCH_ABORTED = "Prefetch for %s aborted: %s"
    PREFETCH_FAILED = "Prefetch for %s failed (%s): %s"
    PREFETCH_CRASHED = "Prefetch for %s crashed"
    PREFETCH_STALE_DISCARDED = "Discarded prefetched %s: current track %s is no longer playing"

    # Playback
    PLAYBACK_LOADING = "Loading '%s' (%s)"
    PLAYBACK_SEEK_CORRECTION = "Correcting position %.2fs -> %.2fs"
    PLAYBACK_STALE_SIGNAL = "Ignored stale %s signal"
    PLAYBACK_ADVANCED = "Advanced from '%s' to '%s'"
    PLAYBACK_FAULT = "Playback fault on %s: %s"
    QUEUE_EXHAUSTED = "Queue exhausted for genre %s"
    QUEUE_AT_FIRST_TRACK = "Already at the first track"

    # Session
    GENRE_RESELECTED = "Genre %s already selected"
    GENRE_SWITCH_STARTED = "Switching genre %s -> %s"
    GENRE_SWITCH_ABANDONED = "Genre switch to %s abandoned: %s"
    NEXT_WAITING_FOR_PREFETCH = "Next requested while prefetch runs for genre %s"
    NEXT_TRACK_APPLIED = "Staged '%s' as next track"
    PARAMETERS_RESET = "Parameters reset to defaults of genre %s"
    SESSION_CLOSED = "Player session closed"

    # Provider
    PROVIDER_CLIENT_INITIALIZED = "%s client initialized for %s"
    PROVIDER_NO_API_KEY = "%s API key is not set; requests are unauthenticated"
    PROVIDER_NON_JSON_BODY = "Non-JSON body from %s: %r"
    PROVIDER_RETRY = "%s failed (attempt %d/%d): %s; retrying in %.1fs"
    PROVIDER_RETRIES_EXHAUSTED = "%s gave up after %d attempts: %s"
    PROVIDER_SEARCH_RESULTS = "Search '%s' returned %d playable candidates"
    PROVIDER_SKIPPED_INVALID_RESULT = "Skipped invalid search result %r"
    PROVIDER_SKIPPED_NO_PREVIEW = "Skipped sound %s: no preview URL"
    PROVIDER_PARAMS_IGNORED = "%s ignores tone parameters %s"
    PROVIDER_TRACK_PICKED = "Picked '%s' from %d candidates for genre %s"
    PROVIDER_TEMPO_UNAVAILABLE = "Tempo unavailable for sound %s: %s"

    # Generation
    MUSICGEN_PROMPT = "MusicGen prompt: %s"
    MUSICGEN_TRACK_READY = "Generated track %s for genre %s"
    MUSICGEN_FILE_RELEASED = "Deleted generated file %s"
