import unittest
from datetime import datetime, timedelta, UTC

from jose import jwt

from edublog.auth.auth_handler import ALGORITHM, REFRESH_TOKEN, TokenService
from edublog.models import UserRole
from edublog.utils.exceptions import UnauthorizedException
from tests.support import TEST_SECRET, make_settings

USER_ID = "0123456789abcdef0123456789abcdef"


class TestTokenService(unittest.TestCase):

    def setUp(self):
        self.tokens = TokenService(make_settings(ACCESS_TOKEN_EXPIRE_MINUTES=15, REFRESH_TOKEN_EXPIRE_DAYS=14))

    def test_issue_pair_carries_identity(self):
        pair = self.tokens.issue_token_pair(USER_ID, "ana@escola.com", UserRole.teacher)
        payload = self.tokens.validate(pair.access_token)
        self.assertEqual(payload.sub, USER_ID)
        self.assertEqual(payload.email, "ana@escola.com")
        self.assertEqual(payload.role, UserRole.teacher)

    def test_lifetimes_follow_settings(self):
        pair = self.tokens.issue_token_pair(USER_ID, "ana@escola.com", "student")
        now = datetime.now(UTC).timestamp()
        access = jwt.decode(pair.access_token, TEST_SECRET, algorithms=[ALGORITHM])
        refresh = jwt.decode(pair.refresh_token, TEST_SECRET, algorithms=[ALGORITHM])
        self.assertAlmostEqual(access["exp"] - now, 15 * 60, delta=5)
        self.assertAlmostEqual(refresh["exp"] - now, 14 * 24 * 3600, delta=5)

    def test_refresh_token_is_not_an_access_token(self):
        pair = self.tokens.issue_token_pair(USER_ID, "ana@escola.com", "student")
        with self.assertRaises(UnauthorizedException):
            self.tokens.validate(pair.refresh_token)
        self.assertEqual(self.tokens.validate(pair.refresh_token, REFRESH_TOKEN).sub, USER_ID)

    def test_expired_token_is_rejected(self):
        expired = jwt.encode({
            "sub": USER_ID, "email": "ana@escola.com", "role": "student", "type": "access",
            "exp": datetime.now(UTC) - timedelta(minutes=1),
        }, TEST_SECRET, algorithm=ALGORITHM)
        with self.assertRaises(UnauthorizedException) as ctx:
            self.tokens.validate(expired)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_token_signed_with_other_key_is_rejected(self):
        other = TokenService(make_settings(JWT_SECRET="another-secret"))
        pair = other.issue_token_pair(USER_ID, "ana@escola.com", "student")
        with self.assertRaises(UnauthorizedException):
            self.tokens.validate(pair.access_token)

    def test_garbage_is_rejected(self):
        with self.assertRaises(UnauthorizedException):
            self.tokens.validate("not-a-token")

    def test_token_without_identity_claims_is_rejected(self):
        token = jwt.encode({"sub": USER_ID, "type": "access",
                            "exp": datetime.now(UTC) + timedelta(minutes=5)}, TEST_SECRET, algorithm=ALGORITHM)
        with self.assertRaises(UnauthorizedException):
            self.tokens.validate(token)


if __name__ == "__main__":
    unittest.main()
