"""
Pydantic models for API request/response validation.

Field names follow the wire format the desktop client already speaks:
mostly snake_case, with camelCase for ``audioUrl`` and the request bodies.
"""

from pydantic import BaseModel, ConfigDict, Field

from .database import DBChannel, DBEpisode


def _iso(value) -> str | None:
    return value.isoformat() if value else None


# ─────────────────────────────────────────────────────────────
# Channel / Episode Schemas
# ─────────────────────────────────────────────────────────────

class ChannelResponse(BaseModel):
    id: str
    name: str
    author: str | None
    rss: str
    description: str | None
    last_synced_at: str | None

    @classmethod
    def from_db(cls, channel: DBChannel) -> "ChannelResponse":
        return cls(
            id=channel.id,
            name=channel.name,
            author=channel.author,
            rss=channel.feed_url,
            description=channel.description,
            last_synced_at=_iso(channel.last_synced_at),
        )


class EpisodeResponse(BaseModel):
    """Episode as shown in a channel listing."""
    model_config = ConfigDict(populate_by_name=True)

    guid: str
    channel_id: str
    title: str
    description: str | None
    link: str | None
    pub_date: str | None
    audio_url: str = Field(alias="audioUrl")
    duration: str | None = None
    local_audio_path: str | None = None
    srt_content: str | None = None
    summary: str | None = None
    transcription_status: str
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_db(cls, episode: DBEpisode) -> "EpisodeResponse":
        return cls(
            guid=episode.guid,
            channel_id=episode.channel_id,
            title=episode.title,
            description=episode.description,
            link=episode.link,
            pub_date=_iso(episode.published_at),
            audio_url=episode.audio_url or "",
            duration=episode.duration,
            local_audio_path=episode.cached_audio_path,
            srt_content=episode.transcript,
            summary=episode.summary,
            transcription_status=episode.transcription_state.value,
            created_at=_iso(episode.created_at),
            updated_at=_iso(episode.updated_at),
        )


class EpisodeListResponse(BaseModel):
    success: bool = True
    episodes: list[EpisodeResponse]


# ─────────────────────────────────────────────────────────────
# Media Schemas
# ─────────────────────────────────────────────────────────────

class DownloadRequest(BaseModel):
    guid: str
    url: str


class DownloadResponse(BaseModel):
    path: str
    status: str
    episode: EpisodeResponse | None = None


# ─────────────────────────────────────────────────────────────
# Transcription Schemas
# ─────────────────────────────────────────────────────────────

class SaveSrtRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    guid: str
    srt_content: str = Field(alias="srtContent")


class TranscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_path: str = Field(alias="audioPath")
    guid: str = ""


class TranscribeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    srt_content: str = Field(alias="srtContent")
    line_count: int = Field(alias="lineCount")


class UploadSrtResponse(BaseModel):
    success: bool = True
    message: str
    size: int


class QueueTranscriptionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    guid: str
    audio_url: str = Field(default="", alias="audioUrl")
    title: str = ""


class QueueTranscriptionResponse(BaseModel):
    success: bool = True
    queued: bool
    message: str
    queue_size: int = Field(default=0, alias="queueSize")

    model_config = ConfigDict(populate_by_name=True)


# ─────────────────────────────────────────────────────────────
# Summary Schemas
# ─────────────────────────────────────────────────────────────

class SummaryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    guid: str = ""
    srt_content: str = Field(default="", alias="srtContent")
    api_key: str = Field(default="", alias="apiKey")
    api_base: str = Field(default="", alias="apiBase")
    model: str = ""


class SummaryResponse(BaseModel):
    success: bool = True
    summary: str
    cached: bool = False


# ─────────────────────────────────────────────────────────────
# Status Schemas
# ─────────────────────────────────────────────────────────────

class StatusResponse(BaseModel):
    status: str = "ok"
    version: str
    queue_size: int
    transcription_enabled: bool
    summarization_enabled: bool
