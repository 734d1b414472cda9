"""
Metadata Extractor Cloud Function

Fetches a work page and returns normalized metadata for the catalogue.

Responsibilities:
- Validate the requested URL
- Fetch the page and any feeds it advertises
- Fuse JSON-LD, meta tags, feeds and labeled page text into one record
- Report fetch failures as recoverable errors

Does NOT:
- Store anything (the caller's job)
- Retry failed fetches
- Render previews (see link-preview)
"""

import functions_framework
import json
import logging
from urllib.parse import urlparse

from work_metadata import ExtractorConfig, collect_metadata

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
logger = logging.getLogger(__name__)

# Configuration
CONFIG = ExtractorConfig.from_env()


def validation_error(message: str) -> dict:
    return {
        'data': None,
        'error': {
            'stage': 'validation',
            'message': message,
            'recoverable': False
        }
    }


def validate_url(value) -> str:
    """
    Return the trimmed URL, or raise ValueError naming the problem.

    Examples:
        >>> validate_url(' https://example.com/work ')
        'https://example.com/work'
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError('URL is required')
    url = value.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ValueError('Invalid URL')
    return url


@functions_framework.http
def extract_metadata(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://example.com/works/123"
    }

    Response body is {"data": {...}} on success, or {"data": null,
    "error": {"stage", "message", "recoverable"}} otherwise.
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        headers = {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'POST',
            'Access-Control-Allow-Headers': 'Content-Type',
            'Access-Control-Max-Age': '3600'
        }
        return ('', 204, headers)

    headers = {'Access-Control-Allow-Origin': '*'}

    request_json = request.get_json(silent=True)
    if request_json is None:
        return (json.dumps(validation_error('Invalid JSON')), 400, headers)

    payload = request_json if isinstance(request_json, dict) else {}
    try:
        url = validate_url(payload.get('url'))
    except ValueError as e:
        return (json.dumps(validation_error(str(e))), 400, headers)

    try:
        metadata, failure = collect_metadata(url, CONFIG)

        if failure:
            return (json.dumps({
                'data': None,
                'error': {
                    'stage': 'fetch',
                    'message': failure.message,
                    'recoverable': True
                }
            }), 200, headers)  # Fetch failures are reported in the body

        return (json.dumps({'data': metadata.to_dict()}, ensure_ascii=False), 200, headers)

    except Exception as e:
        logger.exception('Metadata extraction failed for %s', url)
        return (json.dumps({
            'data': None,
            'error': {
                'stage': 'processing',
                'message': str(e),
                'recoverable': False
            }
        }), 500, headers)
