"""
Tests for the GraphQL endpoint.

Queries and mutations go through POST /graphql with the same database,
services and error codes as the REST API.
"""

import pytest

from userauth.models.user import UserRole, UserStatus


GRAPHQL_URL = "/graphql"
DEFAULT_PASSWORD = "Secret.123"

USER_FIELDS = "id email userName status role createdAt updatedAt"


async def execute(client, query, variables=None, headers=None):
    response = await client.post(
        GRAPHQL_URL,
        json={"query": query, "variables": variables or {}},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()


def error_code(result) -> str:
    return result["errors"][0]["extensions"]["code"]


class TestAppQueries:
    async def test_get_app_info(self, client):
        # Act
        result = await execute(
            client,
            "{ getAppInfo { message name version correlationId } }",
            headers={"X-Correlation-Id": "gql-1"},
        )

        # Assert
        assert result["data"]["getAppInfo"] == {
            "message": "Welcome to userauth API",
            "name": "userauth",
            "version": "1.0.0",
            "correlationId": "gql-1",
        }

    async def test_get_health(self, client):
        result = await execute(client, "{ getHealth { status database { status } } }")

        assert result["data"]["getHealth"] == {"status": "ok", "database": {"status": "up"}}


class TestUserQueries:
    async def test_find_by_id(self, client, active_user):
        result = await execute(
            client,
            f"query($id: ID!) {{ findById(id: $id) {{ {USER_FIELDS} }} }}",
            {"id": active_user.id},
        )

        user = result["data"]["findById"]
        assert user["email"] == "jane@example.com"
        assert user["userName"] == "jane"
        assert user["status"] == "ACTIVE"
        assert user["role"] == "USER"

    async def test_find_by_id_missing(self, client):
        result = await execute(client, '{ findById(id: "missing") { id } }')

        assert result["data"] is None
        assert error_code(result) == "USER_NOT_FOUND"
        assert result["errors"][0]["extensions"]["statusCode"] == 404

    async def test_find_by_email(self, client, active_user):
        result = await execute(client, '{ findByEmail(email: "JANE@example.com") { id } }')

        assert result["data"]["findByEmail"]["id"] == active_user.id

    async def test_find_all_with_filter(self, client, make_user):
        await make_user()
        await make_user(email="bob@example.com", user_name="bob", status=UserStatus.BANNED)

        result = await execute(client, "{ findAll(filter: {status: BANNED}) { userName } }")

        assert result["data"]["findAll"] == [{"userName": "bob"}]

    async def test_find_users_paginated(self, client, make_user):
        # Arrange
        for index in range(3):
            await make_user(email=f"u{index}@example.com", user_name=f"u{index}")

        # Act
        result = await execute(
            client,
            """
            {
              findUsersPaginated(page: 1, limit: 2, sort: {by: USER_NAME, order: DESC}) {
                paginationInfo { totalDocs start end totalPages page next previous }
                data { userName }
              }
            }
            """,
        )

        # Assert
        page = result["data"]["findUsersPaginated"]
        assert [u["userName"] for u in page["data"]] == ["u2", "u1"]
        assert page["paginationInfo"] == {
            "totalDocs": 3,
            "start": 0,
            "end": 1,
            "totalPages": 2,
            "page": 1,
            "next": 2,
            "previous": None,
        }

    async def test_me_requires_token(self, client):
        result = await execute(client, "{ me { id } }")

        assert error_code(result) == "UNAUTHORIZED"

    async def test_me(self, client, active_user, auth_headers):
        result = await execute(client, "{ me { userName } }", headers=auth_headers(active_user))

        assert result["data"]["me"] == {"userName": "jane"}


class TestUserMutations:
    async def test_create(self, client):
        result = await execute(
            client,
            f"""
            mutation($input: CreateUserInput!) {{
              create(input: $input) {{ {USER_FIELDS} }}
            }}
            """,
            {"input": {"email": "New@Example.com", "userName": "newbie", "password": "Secret.123"}},
        )

        created = result["data"]["create"]
        assert created["email"] == "new@example.com"
        assert created["status"] == "REGISTERED"

    async def test_create_duplicate(self, client, active_user):
        result = await execute(
            client,
            'mutation { create(input: {email: "jane@example.com", userName: "other", password: "Secret.123"}) { id } }',
        )

        assert error_code(result) == "EMAIL_ALREADY_EXISTS"
        assert result["errors"][0]["extensions"]["statusCode"] == 409

    async def test_create_invalid_password(self, client):
        result = await execute(
            client,
            'mutation { create(input: {email: "a@example.com", userName: "alpha", password: "weak"}) { id } }',
        )

        extensions = result["errors"][0]["extensions"]
        assert extensions["code"] == "VALIDATION_ERROR"
        assert extensions["statusCode"] == 400
        assert any(error["field"] == "password" for error in extensions["errors"])

    async def test_update_requires_admin(self, client, active_user, auth_headers):
        result = await execute(
            client,
            'mutation($id: ID!) { update(id: $id, input: {status: BANNED}) { status } }',
            {"id": active_user.id},
            headers=auth_headers(active_user),
        )

        assert error_code(result) == "FORBIDDEN"

    async def test_update_as_admin(self, client, active_user, admin_user, auth_headers):
        result = await execute(
            client,
            'mutation($id: ID!) { update(id: $id, input: {status: INACTIVE, role: ADMIN}) { status role } }',
            {"id": active_user.id},
            headers=auth_headers(admin_user),
        )

        assert result["data"]["update"] == {
            "status": UserStatus.INACTIVE.value,
            "role": UserRole.ADMIN.value,
        }


class TestAuthMutations:
    SIGN_IN = """
        mutation($input: SignInInput!) {
          signIn(input: $input) { token refreshToken expiresAt createdAt user { userName } }
        }
    """

    async def test_sign_up(self, client):
        result = await execute(
            client,
            'mutation { signUp(input: {email: "s@example.com", userName: "signup", password: "Secret.123"}) { status } }',
        )

        assert result["data"]["signUp"] == {"status": "REGISTERED"}

    async def test_sign_in(self, client, active_user):
        result = await execute(
            client, self.SIGN_IN, {"input": {"credential": "jane", "password": DEFAULT_PASSWORD}}
        )

        data = result["data"]["signIn"]
        assert data["token"]
        assert len(data["refreshToken"]) == 64
        assert data["user"] == {"userName": "jane"}

    @pytest.mark.parametrize(
        "status,code",
        [(UserStatus.BANNED, "ACCOUNT_BANNED"), (UserStatus.INACTIVE, "ACCOUNT_INACTIVE")],
    )
    async def test_sign_in_blocked_status(self, client, make_user, status, code):
        await make_user(status=status)

        result = await execute(
            client, self.SIGN_IN, {"input": {"credential": "jane", "password": DEFAULT_PASSWORD}}
        )

        assert error_code(result) == code

    async def test_sign_in_wrong_password(self, client, active_user):
        result = await execute(
            client, self.SIGN_IN, {"input": {"credential": "jane", "password": "Wrong.123"}}
        )

        assert error_code(result) == "INVALID_CREDENTIALS"
        assert result["errors"][0]["message"] == "Invalid credentials provided"

    async def test_refresh_and_sign_out(self, client, active_user):
        # Arrange
        signed_in = await execute(
            client, self.SIGN_IN, {"input": {"credential": "jane", "password": DEFAULT_PASSWORD}}
        )
        first_token = signed_in["data"]["signIn"]["refreshToken"]

        # Act
        refreshed = await execute(
            client,
            "mutation($token: String!) { refreshToken(token: $token) { refreshToken } }",
            {"token": first_token},
        )
        second_token = refreshed["data"]["refreshToken"]["refreshToken"]
        reused = await execute(
            client,
            "mutation($token: String!) { refreshToken(token: $token) { refreshToken } }",
            {"token": first_token},
        )
        signed_out = await execute(
            client, "mutation($token: String!) { signOut(token: $token) }", {"token": second_token}
        )
        signed_out_again = await execute(
            client, "mutation($token: String!) { signOut(token: $token) }", {"token": second_token}
        )

        # Assert
        assert second_token != first_token
        assert error_code(reused) == "INVALID_REFRESH_TOKEN"
        assert signed_out["data"]["signOut"] is True
        assert signed_out_again["data"]["signOut"] is False


class TestErrorFormatting:
    async def test_unknown_field(self, client):
        response = await client.post(GRAPHQL_URL, json={"query": "{ doesNotExist }"})

        result = response.json()
        assert result["errors"]
        assert "doesNotExist" in result["errors"][0]["message"]
