# app/utils/test_datetime_utils.py
"""
시간 관리 유틸리티 기능 테스트

사용법: python -m pytest app/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from app.utils.datetime_utils import DateTimeUtils


def test_parse_iso_datetime():
    """ISO 포맷 파싱 테스트"""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+09:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc  # UTC로 정규화되어야 함

    kst = DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+09:00")
    assert kst.hour == 1


def test_to_iso_string():
    """ISO 문자열 생성 테스트"""
    assert DateTimeUtils.to_iso_string(datetime(2024, 1, 15, 10, 30)) == "2024-01-15T10:30:00Z"
    assert DateTimeUtils.to_iso_string(None) is None


def test_for_firestore():
    """Firestore 저장 변환 테스트"""
    test_data = {
        'createdAt': datetime(2024, 1, 15, 10, 30),
        'nested': {'day': date(2023, 12, 25)},
        'list_data': [{'likedAt': datetime(2024, 1, 1)}],
        'title': 'Alpha Launch',
    }

    converted = DateTimeUtils.for_firestore(test_data)

    assert converted['createdAt'].tzinfo == timezone.utc
    assert isinstance(converted['nested']['day'], datetime)
    assert converted['list_data'][0]['likedAt'].tzinfo == timezone.utc
    assert converted['title'] == 'Alpha Launch'


def test_from_firestore_normalizes_timezones():
    """Firestore 읽기 변환 테스트"""
    kst = timezone(timedelta(hours=9))
    data = {'createdAt': datetime(2024, 1, 15, 19, 30, tzinfo=kst), 'likes': 3}

    converted = DateTimeUtils.from_firestore(data)

    assert converted['createdAt'] == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    assert converted['likes'] == 3


def test_format_display():
    assert DateTimeUtils.format_display(None) == "Date unknown"
    assert DateTimeUtils.format_display(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)) == "Jan 15, 2024, 10:30 AM"


def test_error_handling():
    """오류 처리 테스트"""
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")
