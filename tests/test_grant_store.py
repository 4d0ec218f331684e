# tests/test_grant_store.py

"""
Tests for the grant matrix store: default-deny reads and atomic replaces.
"""

import pytest

from core import grant_store
from core.errors import InvalidGrantPayload, NotFoundError, StoreUnavailable


def _as_tuples(grants):
    return sorted((g.page_id, g.permission_type, g.is_granted) for g in grants)


def test_grants_for_role_cover_every_catalog_pair(fake_db):
    grants = grant_store.get_grants_for_role(5)

    # 1 + 4 + 5 + 1 + 5 types across the five active pages
    assert len(grants) == 16
    granted = {(g.page_id, g.permission_type) for g in grants if g.is_granted}
    assert granted == {(2, "view"), (3, "view"), (4, "view")}


def test_role_without_rows_is_all_false(fake_db):
    grants = grant_store.get_grants_for_role(4)

    assert len(grants) == 16
    assert not any(g.is_granted for g in grants)


def test_replace_page_round_trip_keeps_explicit_false(fake_db):
    sent = [
        {"permissionType": "view", "isGranted": True},
        {"permissionType": "update", "isGranted": False},
    ]
    grant_store.replace_grants_for_page(5, 2, sent)

    page_grants = [g for g in grant_store.get_grants_for_role(5) if g.page_id == 2]
    assert {(g.permission_type, g.is_granted) for g in page_grants} == {
        ("view", True), ("update", False), ("create", False), ("delete", False),
    }
    # explicit false row is stored, unsent types are absent
    assert [r for r in fake_db.grants_for(5) if r[0] == 2] == [
        (2, "update", False), (2, "view", True),
    ]


def test_replace_page_leaves_other_pages_alone(fake_db):
    grant_store.replace_grants_for_page(5, 2, [])

    assert fake_db.grants_for(5) == [(3, "view", True), (4, "view", True)]


def test_replace_all_stores_only_granted_rows(fake_db):
    stored = grant_store.replace_all_grants_for_role(5, [
        {"pageId": 1, "permissions": [{"permissionType": "view", "isGranted": True}]},
        {"pageId": 3, "permissions": [
            {"permissionType": "view", "isGranted": True},
            {"permissionType": "assign", "isGranted": False},
        ]},
    ])

    assert stored == 2
    assert fake_db.grants_for(5) == [(1, "view", True), (3, "view", True)]
    # other roles untouched
    assert (5, "view", True) in fake_db.grants_for(3)


def test_replace_all_with_empty_payload_clears_role(fake_db):
    assert grant_store.replace_all_grants_for_role(5, []) == 0
    assert fake_db.grants_for(5) == []


@pytest.mark.parametrize("payload", [
    [{"permissions": [{"permissionType": "view", "isGranted": True}]}],
    [{"pageId": 2, "permissions": [{"isGranted": True}]}],
    [{"pageId": 2, "permissions": [{"permissionType": "approve", "isGranted": True}]}],
    [{"pageId": 4, "permissions": [{"permissionType": "delete", "isGranted": True}]}],
    [{"pageId": 6, "permissions": [{"permissionType": "view", "isGranted": True}]}],
    [{"pageId": 2, "permissions": [
        {"permissionType": "view", "isGranted": True},
        {"permissionType": "view", "isGranted": False},
    ]}],
    [{"pageId": 2, "permissions": "view"}],
    None,
])
def test_invalid_bulk_payload_changes_nothing(fake_db, payload):
    before = fake_db.grants_for(5)

    with pytest.raises(InvalidGrantPayload):
        grant_store.replace_all_grants_for_role(5, payload)

    assert fake_db.grants_for(5) == before
    assert ("rpc", "replace_role_grants") not in fake_db.calls


def test_invalid_entry_late_in_payload_changes_nothing(fake_db):
    before = fake_db.grants_for(5)
    payload = [
        {"pageId": 1, "permissions": [{"permissionType": "view", "isGranted": True}]},
        {"pageId": 2, "permissions": [{"permissionType": "view", "isGranted": True}]},
        {"pageId": None, "permissions": [{"permissionType": "view", "isGranted": True}]},
    ]

    with pytest.raises(InvalidGrantPayload):
        grant_store.replace_all_grants_for_role(5, payload)

    assert fake_db.grants_for(5) == before


def test_failed_replace_preserves_previous_grants(fake_db):
    before = fake_db.grants_for(5)
    fake_db.fail_rpc = True

    with pytest.raises(StoreUnavailable):
        grant_store.replace_all_grants_for_role(5, [
            {"pageId": 1, "permissions": [{"permissionType": "view", "isGranted": True}]},
        ])

    assert fake_db.grants_for(5) == before
    assert before


def test_admin_grants_cannot_be_replaced(fake_db):
    with pytest.raises(InvalidGrantPayload):
        grant_store.replace_all_grants_for_role(1, [])
    with pytest.raises(InvalidGrantPayload):
        grant_store.replace_grants_for_page(1, 2, [])


def test_replace_page_on_inactive_page_is_not_found(fake_db):
    with pytest.raises(NotFoundError):
        grant_store.replace_grants_for_page(5, 6, [{"permissionType": "view", "isGranted": True}])


def test_replace_is_visible_to_next_read(fake_db):
    grant_store.replace_grants_for_page(4, 5, [{"permissionType": "assign", "isGranted": True}])

    assert grant_store.granted_pairs(4) == {(5, "assign")}
    assert _as_tuples(g for g in grant_store.get_grants_for_role(4) if g.is_granted) == [
        (5, "assign", True),
    ]
