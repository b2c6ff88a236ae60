"""
Tests for native signup / login, profile details and avatar upload.
"""

import pydantic
import pytest

from auth.errors import (
    AccountNotFoundError,
    DuplicateAccountError,
    PasswordMismatchError,
    ValidationError,
)
from auth.schemas import LoginRequest, SignupRequest, UserDetailsIn
from auth.service import AuthService


async def _signup(service, email="a@b.com", password="hunter2", username="abby"):
    return await service.signup(
        SignupRequest(email=email, password=password, username=username)
    )


class TestSignupLogin:
    @pytest.mark.asyncio
    async def test_signup_then_login_end_to_end(self, context, repo):
        service = AuthService(context, repo)

        created = await _signup(service)
        assert created.created is True
        assert created.account.email == "a@b.com"
        assert created.account.account_type == "native"
        assert context.tokens.verify(created.token.token) == created.account.user_id

        logged_in = await service.login(LoginRequest(email="a@b.com", password="hunter2"))
        assert logged_in.account.user_id == created.account.user_id
        assert context.tokens.verify(logged_in.token.token) == created.account.user_id

        with pytest.raises(PasswordMismatchError):
            await service.login(LoginRequest(email="a@b.com", password="wrong1"))

    @pytest.mark.asyncio
    async def test_password_stored_only_as_hash(self, context, repo):
        result = await _signup(AuthService(context, repo))
        stored = repo.accounts[result.account.user_id]
        assert stored.password_hash != "hunter2"
        assert "password_hash" not in result.account.model_dump()

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, context, repo):
        service = AuthService(context, repo)
        await _signup(service)
        with pytest.raises(DuplicateAccountError):
            await _signup(service, password="another1")
        assert len(repo.accounts) == 1

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, context, repo):
        with pytest.raises(AccountNotFoundError):
            await AuthService(context, repo).login(
                LoginRequest(email="nobody@b.com", password="hunter2")
            )

    @pytest.mark.asyncio
    async def test_discord_account_cannot_password_login_with_guess(self, context, repo):
        from auth.reconciler import IdentityReconciler

        await IdentityReconciler(context, repo).reconcile("code-1")
        with pytest.raises(PasswordMismatchError):
            await AuthService(context, repo).login(
                LoginRequest(email="nelly@discord.com", password="hunter2")
            )


class TestRequestContracts:
    @pytest.mark.parametrize("model", [SignupRequest, LoginRequest])
    def test_password_limit_counts_bytes(self, model):
        with pytest.raises(pydantic.ValidationError, match="72 bytes"):
            model(email="a@b.com", password="é" * 72)

    def test_72_byte_password_accepted(self):
        assert LoginRequest(email="a@b.com", password="é" * 36).password == "é" * 36


class TestDetailsAndAvatar:
    @pytest.mark.asyncio
    async def test_set_and_get_details(self, context, repo):
        service = AuthService(context, repo)
        user_id = (await _signup(service)).account.user_id

        await service.set_details(
            user_id, UserDetailsIn(username="abby", phone=5551234, twitter="@abby")
        )
        details = await service.get_details(user_id)
        assert details.twitter == "@abby"
        assert details.phone == 5551234

    @pytest.mark.asyncio
    async def test_missing_details(self, context, repo):
        service = AuthService(context, repo)
        user_id = (await _signup(service)).account.user_id
        with pytest.raises(AccountNotFoundError):
            await service.get_details(user_id)

    @pytest.mark.asyncio
    async def test_avatar_written_and_recorded(self, context, repo, settings, tmp_path):
        service = AuthService(context, repo)
        user_id = (await _signup(service)).account.user_id

        stored = await service.upload_avatar(
            user_id, "../../me.png", b"\x89PNG fake", "image/png"
        )
        assert stored.filename == f"{user_id}_me.png"
        assert (tmp_path / "avatars" / stored.filename).read_bytes() == b"\x89PNG fake"
        assert repo.avatars[user_id] == stored.filename

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "filename, content, content_type",
        [
            ("me.txt", b"hello", "text/plain"),
            ("me.png", b"", "image/png"),
            ("", b"data", "image/png"),
        ],
    )
    async def test_avatar_validation(self, context, repo, filename, content, content_type):
        service = AuthService(context, repo)
        user_id = (await _signup(service)).account.user_id
        with pytest.raises(ValidationError):
            await service.upload_avatar(user_id, filename, content, content_type)

    @pytest.mark.asyncio
    async def test_avatar_size_limit(self, context, repo, settings):
        service = AuthService(context, repo)
        user_id = (await _signup(service)).account.user_id
        too_big = b"x" * (settings.avatar_max_bytes + 1)
        with pytest.raises(ValidationError, match="size limit"):
            await service.upload_avatar(user_id, "me.png", too_big, "image/png")

    @pytest.mark.asyncio
    async def test_avatar_for_unknown_user(self, context, repo, tmp_path):
        with pytest.raises(AccountNotFoundError):
            await AuthService(context, repo).upload_avatar(
                "ghost", "me.png", b"data", "image/png"
            )
        assert not (tmp_path / "avatars").exists()
