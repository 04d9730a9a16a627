from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class SiteRules(BaseModel):
    name: str
    media_path: str = "/media"

class UploadsRules(BaseModel):
    max_upload_bytes: int = Field(gt=0)
    allowlist_mime_types: list[str]

class ImageRules(BaseModel):
    jpeg_quality: int = Field(80, ge=1, le=95)
    banner_max_width: int = Field(1200, gt=0)
    avatar_max_width: int = Field(400, gt=0)

class TestimonialRules(BaseModel):
    max_text_length: int = Field(280, gt=0)
    allowed_link_hosts: list[str] = ["twitter.com", "x.com"]

class ModerationRules(BaseModel):
    confirmation_ttl_seconds: int = Field(300, gt=0)
    use_transactions: bool = True

class NewsletterRules(BaseModel):
    compose_base_url: str
    export_filename_prefix: str = "newsletter_subscribers"

class OpsRules(BaseModel):
    log_level: str = "INFO"
    required_env: list[str] = []

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level

class Rules(BaseModel):
    project: ProjectRules
    site: SiteRules
    uploads: UploadsRules
    images: ImageRules
    testimonials: TestimonialRules
    moderation: ModerationRules
    newsletter: NewsletterRules
    ops: OpsRules
