"""Tests for GET /cities and GET /tags."""
from profile_directory.imports.reconciler import resolve_city, attach_tags
from profile_directory.models.tag import Tag


class TestCities:

    def test_counts_accounts_per_city(self, client, db_session, make_account):
        kazan = resolve_city(db_session, 'Kazan')
        moscow = resolve_city(db_session, 'Moscow')
        resolve_city(db_session, 'Empty')
        db_session.commit()
        make_account(city_id=kazan)
        make_account(city_id=moscow)
        make_account(city_id=moscow)

        resp = client.get('/cities')
        assert resp.status_code == 200
        assert resp.get_json() == [
            {'city_id': moscow, 'city_name': 'Moscow', 'account_count': 2},
            {'city_id': kazan, 'city_name': 'Kazan', 'account_count': 1},
        ]

    def test_empty(self, client):
        assert client.get('/cities').get_json() == []


class TestTags:

    def test_usage_counts_include_unused(self, client, db_session, make_account):
        a, b = make_account(), make_account()
        attach_tags(db_session, a.id, 'yoga, travel')
        attach_tags(db_session, b.id, 'yoga')
        db_session.add(Tag(name_ru='unused'))
        db_session.commit()

        data = client.get('/tags').get_json()
        assert [(t['name_ru'], t['usage_count']) for t in data] == [
            ('yoga', 2), ('travel', 1), ('unused', 0),
        ]
