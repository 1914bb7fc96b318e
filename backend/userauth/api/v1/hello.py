"""Greeting endpoints."""

from fastapi import APIRouter

from userauth.schemas.hello import HelloResponse, SayHelloRequest
from userauth.services.hello import get_hello, say_hello


router = APIRouter()


@router.get("", response_model=HelloResponse, summary="Default greeting")
async def hello() -> HelloResponse:
    return HelloResponse(**get_hello())


@router.post("/say", response_model=HelloResponse, summary="Greet by name")
async def hello_say(request: SayHelloRequest) -> HelloResponse:
    return HelloResponse(**say_hello(request))
