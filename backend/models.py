from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class WhisperSegment(BaseModel):
    """A segment from an OpenAI-style verbose_json transcription"""
    id: int = 0
    seek: int = 0
    start: float
    end: float
    text: str
    tokens: List[int] = []
    temperature: float = 0.0
    avg_logprob: Optional[float] = None
    compression_ratio: Optional[float] = None
    no_speech_prob: Optional[float] = None


class WhisperVerboseResponse(BaseModel):
    """Response body of /audio/transcriptions (json or verbose_json)"""
    text: str = ""
    language: Optional[str] = None
    duration: Optional[float] = None
    segments: List[WhisperSegment] = []


class ScribeWord(BaseModel):
    """One entry of an ElevenLabs Scribe word-timestamp list"""
    model_config = ConfigDict(extra="ignore")

    text: str = ""
    start: float = 0.0
    end: float = 0.0
    type: str = "word"


class ScribeResponse(BaseModel):
    """Response body of ElevenLabs /speech-to-text"""
    model_config = ConfigDict(extra="ignore")

    text: str = ""
    language_code: Optional[str] = None
    words: List[ScribeWord] = []


class LoudnormReport(BaseModel):
    """The JSON block ffmpeg's loudnorm filter prints with print_format=json.

    ffmpeg prints every value as a string; numeric strings are coerced.
    """
    model_config = ConfigDict(extra="ignore")

    input_i: float
    input_tp: float
    input_lra: float
    input_thresh: float
    target_offset: float
    normalization_type: Optional[str] = None


class TimeRangeModel(BaseModel):
    start: float
    end: float


class SpeechBoundaryResponse(BaseModel):
    speech_start: float
    speech_end: float
    total_duration: float
    fallback: bool = False


class AudioPathRequest(BaseModel):
    path: str


class MusicRegionRequest(BaseModel):
    path: str
    min_duration: Optional[float] = Field(default=None, gt=0)
    merge_gap: Optional[float] = Field(default=None, ge=0)


class AssembleRequest(BaseModel):
    segment_paths: List[str]
    output_path: str
    intro_path: Optional[str] = None
    outro_path: Optional[str] = None


class AssembleResponse(BaseModel):
    output_path: Optional[str] = None
    duration: Optional[float] = None


class TranscriptFilterRequest(BaseModel):
    segments: List[WhisperSegment]
    music_regions: List[TimeRangeModel] = []


class TranscriptFilterResponse(BaseModel):
    text: str
    segments: List[WhisperSegment]
    dropped: int


class LanguageEpisodeBody(BaseModel):
    source_audio_path: str
    output_path: str
    intro_path: Optional[str] = None
    outro_path: Optional[str] = None
    language: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class LanguageEpisodeResponse(BaseModel):
    output_path: Optional[str] = None
    transcript_path: str
    transcript: str
    speech_boundary: SpeechBoundaryResponse
    engine_errors: dict[str, str] = {}
