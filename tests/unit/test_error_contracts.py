"""
Error Contract Tests - Defines how errors cross the HTTP boundary.

These tests serve as guardrails to ensure consistent error handling.

Error Classification:
====================

CLIENT ERRORS (HTTP 400, not recoverable, no network access):
- Body is not valid JSON
- Missing or blank url
- Malformed url or a scheme other than http(s)

FETCH ERRORS (HTTP 200 with data null and error field, recoverable):
- Page timed out, returned non-2xx, or the connection failed

PROCESSING ERRORS (HTTP 500, not recoverable):
- Unhandled exceptions during extraction

SUCCESS (HTTP 200, no error field):
- {"data": {...}} with every metadata field present, possibly null

Every error object carries stage, message and recoverable.
"""

import json
from unittest.mock import patch

import pytest

from work_metadata import ExtractedMetadata, FetchFailure


def _call(handler, request):
    body, status_code, headers = handler(request)
    return (json.loads(body) if body else None), status_code, headers


class TestClientErrors:
    """Validation failures are answered with 400 before any fetch."""

    def test_invalid_json(self, mock_flask_request, extract_metadata_handler):
        request = mock_flask_request(invalid_json=True)
        with patch('metadata_extractor_main.collect_metadata') as collect:
            data, status_code, _ = _call(extract_metadata_handler, request)

        assert status_code == 400
        assert data == {
            'data': None,
            'error': {'stage': 'validation', 'message': 'Invalid JSON', 'recoverable': False},
        }
        collect.assert_not_called()

    @pytest.mark.parametrize('payload', [{}, {'url': ''}, {'url': '   '}, {'url': None}, ['https://example.com']])
    def test_missing_url(self, mock_flask_request, extract_metadata_handler, payload):
        request = mock_flask_request(json_data=payload)
        with patch('metadata_extractor_main.collect_metadata') as collect:
            data, status_code, _ = _call(extract_metadata_handler, request)

        assert status_code == 400
        assert data['error']['message'] == 'URL is required'
        assert data['error']['recoverable'] is False
        collect.assert_not_called()

    @pytest.mark.parametrize('url', ['not-a-url', 'ftp://example.com/file', 'javascript:alert(1)', 'https://'])
    def test_invalid_url(self, mock_flask_request, extract_metadata_handler, url):
        request = mock_flask_request(json_data={'url': url})
        with patch('metadata_extractor_main.collect_metadata') as collect:
            data, status_code, _ = _call(extract_metadata_handler, request)

        assert status_code == 400
        assert data['error']['message'] == 'Invalid URL'
        collect.assert_not_called()

    def test_validate_url_trims(self, validate_url):
        assert validate_url('  https://example.com/a  ') == 'https://example.com/a'


class TestFetchAndProcessingErrors:
    """Fetch failures are recoverable 200s; exceptions are 500s."""

    def test_fetch_failure_is_recoverable(self, mock_flask_request, extract_metadata_handler):
        request = mock_flask_request(json_data={'url': 'https://example.com/missing'})
        failure = FetchFailure('http_status', 'HTTP error: 404', status_code=404)
        with patch('metadata_extractor_main.collect_metadata', return_value=(None, failure)):
            data, status_code, headers = _call(extract_metadata_handler, request)

        assert status_code == 200
        assert data == {
            'data': None,
            'error': {'stage': 'fetch', 'message': 'HTTP error: 404', 'recoverable': True},
        }
        assert headers['Access-Control-Allow-Origin'] == '*'

    def test_unhandled_exception_is_500(self, mock_flask_request, extract_metadata_handler):
        request = mock_flask_request(json_data={'url': 'https://example.com/a'})
        with patch('metadata_extractor_main.collect_metadata', side_effect=RuntimeError('boom')):
            data, status_code, _ = _call(extract_metadata_handler, request)

        assert status_code == 500
        assert data['data'] is None
        assert data['error'] == {'stage': 'processing', 'message': 'boom', 'recoverable': False}

    def test_success_has_no_error_field(self, mock_flask_request, extract_metadata_handler):
        request = mock_flask_request(json_data={'url': 'https://example.com/a'})
        metadata = ExtractedMetadata(primary_title='測試作品')
        with patch('metadata_extractor_main.collect_metadata', return_value=(metadata, None)):
            data, status_code, _ = _call(extract_metadata_handler, request)

        assert status_code == 200
        assert 'error' not in data
        assert data['data']['primaryTitle'] == '測試作品'
        assert set(data['data']) == set(ExtractedMetadata().to_dict())


class TestCors:
    """Preflight requests are answered without touching the body."""

    def test_extractor_preflight(self, mock_flask_request, extract_metadata_handler):
        body, status_code, headers = extract_metadata_handler(mock_flask_request(method='OPTIONS'))
        assert body == ''
        assert status_code == 204
        assert headers['Access-Control-Allow-Methods'] == 'POST'

    def test_preview_preflight(self, mock_flask_request, link_preview_handler):
        body, status_code, headers = link_preview_handler(mock_flask_request(method='OPTIONS'))
        assert status_code == 204
        assert headers['Access-Control-Allow-Methods'] == 'GET'


class TestPreviewClientErrors:
    """Link preview validation."""

    def test_missing_url(self, mock_flask_request, link_preview_handler):
        with patch('link_preview_main.fetch_link_preview') as fetch:
            data, status_code, _ = _call(link_preview_handler, mock_flask_request(method='GET'))
        assert status_code == 400
        assert data['error']['message'] == 'URL is required'
        fetch.assert_not_called()

    def test_invalid_url(self, mock_flask_request, link_preview_handler):
        request = mock_flask_request(method='GET', args={'url': 'mailto:someone@example.com'})
        with patch('link_preview_main.fetch_link_preview') as fetch:
            data, status_code, _ = _call(link_preview_handler, request)
        assert status_code == 400
        assert data['error']['message'] == 'Invalid URL'
        fetch.assert_not_called()

    @pytest.mark.parametrize('kind,expected_status', [
        ('timeout', 504),
        ('network', 502),
        ('http_status', 502),
    ])
    def test_fetch_failures_map_to_gateway_errors(self, mock_flask_request, link_preview_handler, kind, expected_status):
        request = mock_flask_request(method='GET', args={'url': 'https://example.com/a'})
        with patch('link_preview_main.fetch_link_preview', return_value=(None, FetchFailure(kind, 'failed'))):
            data, status_code, _ = _call(link_preview_handler, request)
        assert status_code == expected_status
        assert data['error']['stage'] == 'fetch'
