"""Work metadata extraction for the cataloguing tool."""

from .config import ExtractorConfig

from .models import (
    Creator,
    Episode,
    ExtractedMetadata,
    Fact,
    LinkPreview,
)

from .fetcher import FetchFailure, FetchedDocument, fetch_document

from .assembler import (
    build_metadata,
    collect_metadata,
    extract_from_html,
    extract_metadata,
)

from .preview import build_link_preview, fetch_link_preview

from .client import fetch_external_item_data

from .dates import normalize_date

from .language import detect_language, normalize_language_code

__all__ = [
    # Configuration
    'ExtractorConfig',
    # Records
    'Creator',
    'Episode',
    'ExtractedMetadata',
    'Fact',
    'LinkPreview',
    # Fetching
    'FetchFailure',
    'FetchedDocument',
    'fetch_document',
    # Extraction
    'build_metadata',
    'collect_metadata',
    'extract_from_html',
    'extract_metadata',
    # Link previews
    'build_link_preview',
    'fetch_link_preview',
    # Client
    'fetch_external_item_data',
    # Utilities
    'normalize_date',
    'detect_language',
    'normalize_language_code',
]
