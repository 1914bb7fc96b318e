from pydantic import BaseModel, Field, field_validator


class HelloResponse(BaseModel):
    msg: str = Field(description="Hello message", examples=["Hola Mundo!"])


class SayHelloRequest(BaseModel):
    name: str = Field(min_length=1, description="Name to greet")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v
