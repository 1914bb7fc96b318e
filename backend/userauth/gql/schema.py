"""
GraphQL schema: queries, mutations and the FastAPI router.

Resolvers delegate to the same use cases as the REST routes; see
userauth.gql.context for how services are wired per request.
"""

from typing import List, Optional

import strawberry
from graphql import GraphQLError
from pydantic import ValidationError as PydanticValidationError
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext, Info

from userauth.core.errors import AppError
from userauth.gql.context import admin_user, auth_service, current_user, get_context, user_service
from userauth.gql.extensions import ErrorFormattingExtension
from userauth.gql.types import (
    AppInfoType,
    AuthResponse,
    CreateUserInput,
    HealthType,
    PaginationInfoType,
    SignInInput,
    UpdateUserInput,
    UserFilterInput,
    UserPaginated,
    UserSortInput,
    UserType,
)
from userauth.schemas.user import UserCreateRequest, UserUpdateRequest


def _create_request(data: CreateUserInput) -> UserCreateRequest:
    # Runs the same validators as the REST body
    return UserCreateRequest(email=data.email, user_name=data.user_name, password=data.password)


@strawberry.type
class Query:
    @strawberry.field(name="getAppInfo")
    def get_app_info(self, info: Info) -> AppInfoType:
        return AppInfoType.from_schema(info.context["app_service"].get_app_info())

    @strawberry.field(name="getHealth")
    async def get_health(self, info: Info) -> HealthType:
        return HealthType.from_schema(await info.context["app_service"].get_health())

    @strawberry.field(name="findById")
    async def find_by_id(self, info: Info, id: strawberry.ID) -> UserType:
        return UserType.from_model(await user_service(info).find_by_id(str(id)))

    @strawberry.field(name="findByEmail")
    async def find_by_email(self, info: Info, email: str) -> UserType:
        return UserType.from_model(await user_service(info).find_by_email(email))

    @strawberry.field(name="findAll")
    async def find_all(self, info: Info, filter: Optional[UserFilterInput] = None) -> List[UserType]:
        users = await user_service(info).find_all(filter.to_schema() if filter else None)
        return [UserType.from_model(user) for user in users]

    @strawberry.field(name="findUsersPaginated")
    async def find_users_paginated(
        self,
        info: Info,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        filter: Optional[UserFilterInput] = None,
        sort: Optional[UserSortInput] = None,
    ) -> UserPaginated:
        result = await user_service(info).find_paginated(
            page,
            limit,
            filter.to_schema() if filter else None,
            sort.to_schema() if sort else None,
        )
        return UserPaginated(
            pagination_info=PaginationInfoType.from_schema(result.pagination_info),
            data=[UserType.from_model(user) for user in result.data],
        )

    @strawberry.field
    async def me(self, info: Info) -> UserType:
        return UserType.from_model(await current_user(info))


@strawberry.type
class Mutation:
    @strawberry.mutation
    async def create(self, info: Info, input: CreateUserInput) -> UserType:
        user = await user_service(info).create(_create_request(input))
        return UserType.from_model(user)

    @strawberry.mutation
    async def update(self, info: Info, id: strawberry.ID, input: UpdateUserInput) -> UserType:
        await admin_user(info)
        user = await user_service(info).update(
            str(id), UserUpdateRequest(status=input.status, role=input.role)
        )
        return UserType.from_model(user)

    @strawberry.mutation(name="signUp")
    async def sign_up(self, info: Info, input: CreateUserInput) -> UserType:
        user = await auth_service(info).sign_up(_create_request(input))
        return UserType.from_model(user)

    @strawberry.mutation(name="signIn")
    async def sign_in(self, info: Info, input: SignInInput) -> AuthResponse:
        result = await auth_service(info).sign_in(input.credential, input.password)
        return AuthResponse.from_result(result)

    @strawberry.mutation(name="refreshToken")
    async def refresh_token(self, info: Info, token: str) -> AuthResponse:
        return AuthResponse.from_result(await auth_service(info).refresh(token))

    @strawberry.mutation(name="signOut")
    async def sign_out(self, info: Info, token: str) -> bool:
        return await auth_service(info).sign_out(token) > 0


class AppSchema(strawberry.Schema):
    """Schema that leaves expected application errors out of the error log."""

    def process_errors(
        self,
        errors: List[GraphQLError],
        execution_context: Optional[ExecutionContext] = None,
    ) -> None:
        unexpected = [
            error for error in errors
            if error.original_error is not None
            and not isinstance(error.original_error, (AppError, PydanticValidationError))
        ]
        if unexpected:
            super().process_errors(unexpected, execution_context)


schema = AppSchema(
    query=Query,
    mutation=Mutation,
    extensions=[ErrorFormattingExtension],
)


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
