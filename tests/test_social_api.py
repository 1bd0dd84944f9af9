"""
HTTP tests for auth, profiles, follows, watch logs and the feed,
chạy trên một SQLite database tạm.
"""

import unittest

from fastapi.testclient import TestClient

from watchly.main import app
from watchly.web.utils.database import get_db
from tests.db_helpers import create_temp_database, drop_temp_database


class SocialAPITestCase(unittest.TestCase):

    def setUp(self):
        self.db = create_temp_database()
        app.dependency_overrides[get_db] = self.db.get_db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        drop_temp_database(self.db)

    def register(self, email, display_name=None, password="secret123"):
        response = self.client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "display_name": display_name}
        )
        self.assertEqual(response.status_code, 201, response.text)
        data = response.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['access_token']}"}

    def log(self, headers, title, is_post=False, **extra):
        response = self.client.post(
            "/api/watch-logs",
            json={"title": title, "is_post": is_post, **extra},
            headers=headers
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()


class TestAuth(SocialAPITestCase):

    def test_register_login_me(self):
        user_id, headers = self.register("Alice@Example.com", "Alice")

        response = self.client.post(
            "/api/auth/login",
            json={"email": "alice@example.com", "password": "secret123"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["id"], user_id)
        self.assertIsNotNone(response.json()["user"]["last_login"])

        me = self.client.get("/api/auth/me", headers=headers)
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["email"], "alice@example.com")

    def test_duplicate_email(self):
        self.register("bob@example.com")
        response = self.client.post(
            "/api/auth/register",
            json={"email": "BOB@example.com", "password": "another1"}
        )
        self.assertEqual(response.status_code, 409)

    def test_wrong_password(self):
        self.register("carol@example.com")
        response = self.client.post(
            "/api/auth/login",
            json={"email": "carol@example.com", "password": "wrong-password"}
        )
        self.assertEqual(response.status_code, 401)

    def test_password_over_72_bytes_rejected(self):
        """Test the bcrypt limit is checked in bytes, not characters."""
        response = self.client.post(
            "/api/auth/register",
            json={"email": "long@example.com", "password": "é" * 40}
        )
        self.assertEqual(response.status_code, 422)
        self.assertIn("72 bytes", response.text)

        # 36 x "é" = 72 bytes vẫn hợp lệ
        self.register("long@example.com", password="é" * 36)

    def test_missing_or_bad_token(self):
        self.assertIn(self.client.get("/api/feed").status_code, (401, 403))
        response = self.client.get("/api/feed", headers={"Authorization": "Bearer not-a-token"})
        self.assertEqual(response.status_code, 401)


class TestProfiles(SocialAPITestCase):

    def test_profile_created_on_register(self):
        user_id, headers = self.register("dana@example.com", "Dana")

        response = self.client.get("/api/profiles/me", headers=headers)
        self.assertEqual(response.status_code, 200)
        profile = response.json()
        self.assertEqual(profile["user_id"], user_id)
        self.assertEqual(profile["display_name"], "Dana")
        self.assertEqual(profile["favorite_genres"], [])

    def test_update_keeps_unset_fields(self):
        _, headers = self.register("erin@example.com", "Erin")

        response = self.client.patch(
            "/api/profiles/me",
            json={"bio": "Horror fan", "favorite_genres": ["Horror", " ", "Thriller "]},
            headers=headers
        )
        self.assertEqual(response.status_code, 200)
        profile = response.json()
        self.assertEqual(profile["display_name"], "Erin")
        self.assertEqual(profile["bio"], "Horror fan")
        self.assertEqual(profile["favorite_genres"], ["Horror", "Thriller"])

    def test_unknown_profile(self):
        _, headers = self.register("finn@example.com")
        response = self.client.get("/api/profiles/does-not-exist", headers=headers)
        self.assertEqual(response.status_code, 404)

    def test_search_excludes_self_and_marks_following(self):
        _, headers = self.register("gina@example.com", "Gina Movie")
        hal_id, _ = self.register("hal@example.com", "Movie Hal")
        self.register("ivy@example.com", "Ivy")
        self.client.post(f"/api/follows/{hal_id}", headers=headers)

        response = self.client.get("/api/profiles/search", params={"q": "MOVIE"}, headers=headers)
        self.assertEqual(response.status_code, 200)
        results = response.json()
        self.assertEqual([r["user_id"] for r in results], [hal_id])
        self.assertTrue(results[0]["is_following"])

        by_email = self.client.get("/api/profiles/search", params={"q": "ivy@"}, headers=headers).json()
        self.assertEqual([r["display_name"] for r in by_email], ["Ivy"])

    def test_search_treats_wildcards_literally(self):
        _, headers = self.register("jack@example.com", "Jack")
        self.register("kim@example.com", "Kim")
        response = self.client.get("/api/profiles/search", params={"q": "%"}, headers=headers)
        self.assertEqual(response.json(), [])

    def test_blank_search(self):
        _, headers = self.register("lee@example.com")
        self.register("max@example.com")
        response = self.client.get("/api/profiles/search", params={"q": "  "}, headers=headers)
        self.assertEqual(response.json(), [])


class TestFollows(SocialAPITestCase):

    def test_follow_is_idempotent(self):
        alice_id, alice = self.register("alice@example.com", "Alice")
        bob_id, bob = self.register("bob@example.com", "Bob")

        for _ in range(2):
            response = self.client.post(f"/api/follows/{bob_id}", headers=alice)
            self.assertEqual(response.status_code, 200)
            self.assertTrue(response.json()["is_following"])

        stats = self.client.get(f"/api/profiles/{bob_id}/stats", headers=alice).json()
        self.assertEqual(stats["followers_count"], 1)
        self.assertEqual(stats["following_count"], 0)

        followers = self.client.get(f"/api/profiles/{bob_id}/followers", headers=bob).json()
        self.assertEqual([f["user_id"] for f in followers], [alice_id])
        self.assertFalse(followers[0]["is_following"])

        following = self.client.get(f"/api/profiles/{alice_id}/following", headers=alice).json()
        self.assertEqual([f["display_name"] for f in following], ["Bob"])

    def test_cannot_follow_self(self):
        user_id, headers = self.register("solo@example.com")
        response = self.client.post(f"/api/follows/{user_id}", headers=headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "You cannot follow yourself")

    def test_follow_unknown_user(self):
        _, headers = self.register("nora@example.com")
        response = self.client.post("/api/follows/no-such-user", headers=headers)
        self.assertEqual(response.status_code, 404)

    def test_unfollow(self):
        _, alice = self.register("alice@example.com")
        bob_id, _ = self.register("bob@example.com")
        self.client.post(f"/api/follows/{bob_id}", headers=alice)

        status_before = self.client.get(f"/api/follows/{bob_id}/status", headers=alice).json()
        self.assertTrue(status_before["is_following"])

        response = self.client.delete(f"/api/follows/{bob_id}", headers=alice)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["is_following"])

        status_after = self.client.get(f"/api/follows/{bob_id}/status", headers=alice).json()
        self.assertFalse(status_after["is_following"])

        # unfollow khi chưa follow vẫn OK
        self.assertEqual(self.client.delete(f"/api/follows/{bob_id}", headers=alice).status_code, 200)


class TestWatchLogs(SocialAPITestCase):

    def test_create_and_list(self):
        user_id, headers = self.register("olga@example.com")
        first = self.log(headers, "  Heat  ", caption=" ", emoji="🔥")
        second = self.log(headers, "Up", is_post=True)

        self.assertEqual(first["title"], "Heat")
        self.assertIsNone(first["caption"])
        self.assertEqual(first["emoji"], "🔥")
        self.assertFalse(first["is_post"])
        self.assertTrue(second["is_post"])

        mine = self.client.get("/api/watch-logs/me", headers=headers).json()
        self.assertEqual([log["id"] for log in mine], [second["id"], first["id"]])

        other_id, other = self.register("pete@example.com")
        theirs = self.client.get(f"/api/watch-logs/user/{user_id}", headers=other).json()
        self.assertEqual(len(theirs), 2)

    def test_blank_title_rejected(self):
        _, headers = self.register("quinn@example.com")
        response = self.client.post("/api/watch-logs", json={"title": "   "}, headers=headers)
        self.assertEqual(response.status_code, 422)
        self.assertIn("Please enter a movie or show title", response.text)

    def test_delete_permissions(self):
        _, owner = self.register("rita@example.com")
        _, stranger = self.register("sam@example.com")
        log = self.log(owner, "Alien")

        self.assertEqual(self.client.delete(f"/api/watch-logs/{log['id']}", headers=stranger).status_code, 403)
        self.assertEqual(self.client.delete("/api/watch-logs/missing", headers=owner).status_code, 404)
        self.assertEqual(self.client.delete(f"/api/watch-logs/{log['id']}", headers=owner).status_code, 204)
        self.assertEqual(self.client.get("/api/watch-logs/me", headers=owner).json(), [])

    def test_stats_recent_movies_capped_at_five(self):
        user_id, headers = self.register("tess@example.com")
        titles = [f"Movie {i}" for i in range(7)]
        for title in titles:
            self.log(headers, title)

        stats = self.client.get(f"/api/profiles/{user_id}/stats", headers=headers).json()
        self.assertEqual([m["title"] for m in stats["recent_movies"]], list(reversed(titles))[:5])


class TestFeed(SocialAPITestCase):

    def test_feed_contents_and_order(self):
        """Test feed = own logs + followed users' posts, newest first."""
        me_id, me = self.register("uma@example.com", "Uma")
        friend_id, friend = self.register("vic@example.com", "Vic")
        _, stranger = self.register("walt@example.com", "Walt")
        self.client.post(f"/api/follows/{friend_id}", headers=me)

        own_private = self.log(me, "My private log")
        friend_private = self.log(friend, "Friend private log")
        friend_post = self.log(friend, "Friend post", is_post=True, caption="Loved it")
        stranger_post = self.log(stranger, "Stranger post", is_post=True)
        own_post = self.log(me, "My post", is_post=True)

        response = self.client.get("/api/feed", headers=me)
        self.assertEqual(response.status_code, 200)
        feed = response.json()

        ids = [item["id"] for item in feed["items"]]
        self.assertEqual(ids, [own_post["id"], friend_post["id"], own_private["id"]])
        self.assertEqual(feed["total"], 3)
        self.assertNotIn(friend_private["id"], ids)
        self.assertNotIn(stranger_post["id"], ids)

        friend_item = feed["items"][1]
        self.assertEqual(friend_item["author"]["user_id"], friend_id)
        self.assertEqual(friend_item["author"]["display_name"], "Vic")
        self.assertEqual(friend_item["caption"], "Loved it")
        self.assertEqual(feed["items"][0]["author"]["user_id"], me_id)

    def test_unfollow_removes_posts_from_feed(self):
        _, me = self.register("xena@example.com")
        friend_id, friend = self.register("yuri@example.com")
        self.client.post(f"/api/follows/{friend_id}", headers=me)
        self.log(friend, "Shared", is_post=True)

        self.assertEqual(self.client.get("/api/feed", headers=me).json()["total"], 1)
        self.client.delete(f"/api/follows/{friend_id}", headers=me)
        self.assertEqual(self.client.get("/api/feed", headers=me).json()["total"], 0)

    def test_empty_feed(self):
        _, me = self.register("zoe@example.com")
        self.assertEqual(self.client.get("/api/feed", headers=me).json(), {"items": [], "total": 0})


if __name__ == '__main__':
    unittest.main()
