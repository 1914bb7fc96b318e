"""Greeting service and its use cases."""

from typing import Dict

from userauth.schemas.hello import SayHelloRequest


class HelloService:
    def get_hello_message(self) -> str:
        return "Hola Mundo!"

    def say_hello(self, name: str) -> str:
        return f"Hola {name}!"


hello_service = HelloService()


def get_hello(service: HelloService = hello_service) -> Dict[str, str]:
    return {"msg": service.get_hello_message()}


def say_hello(request: SayHelloRequest, service: HelloService = hello_service) -> Dict[str, str]:
    return {"msg": service.say_hello(request.name)}
