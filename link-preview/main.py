"""
Link Preview Cloud Function

Returns a small card (image, title, author, site name) for a URL.

Responsibilities:
- Validate the url query parameter
- Fetch the head of the page within the preview byte limit
- Pick preview fields from meta tags, JSON-LD and inline markup

Does NOT:
- Run the full metadata extraction (see metadata-extractor)
- Follow feeds
- Cache previews
"""

import functions_framework
import json
import logging
from urllib.parse import urlparse

from work_metadata import ExtractorConfig, fetch_link_preview

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
logger = logging.getLogger(__name__)

# Configuration
CONFIG = ExtractorConfig.from_env()

# Upstream failures map to gateway statuses
TIMEOUT_STATUS = 504
UPSTREAM_STATUS = 502


def error_body(stage: str, message: str, recoverable: bool) -> str:
    return json.dumps({
        'error': {
            'stage': stage,
            'message': message,
            'recoverable': recoverable
        }
    })


@functions_framework.http
def link_preview(request):
    """
    Main Cloud Function entry point.

    Expected query: ?url=https://example.com/page
    """
    # Handle CORS
    if request.method == 'OPTIONS':
        headers = {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'GET',
            'Access-Control-Allow-Headers': 'Content-Type',
            'Access-Control-Max-Age': '3600'
        }
        return ('', 204, headers)

    headers = {'Access-Control-Allow-Origin': '*'}

    url = (request.args.get('url') or '').strip()
    if not url:
        return (error_body('validation', 'URL is required', False), 400, headers)

    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return (error_body('validation', 'Invalid URL', False), 400, headers)

    try:
        preview, failure = fetch_link_preview(url, CONFIG)

        if failure:
            status = TIMEOUT_STATUS if failure.kind == 'timeout' else UPSTREAM_STATUS
            return (error_body('fetch', failure.message, True), status, headers)

        return (json.dumps(preview.to_dict(), ensure_ascii=False), 200, headers)

    except Exception as e:
        logger.exception('Link preview failed for %s', url)
        return (error_body('processing', str(e), False), 500, headers)
