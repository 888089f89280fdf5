from pydantic import BaseModel


class AutomaticStatusResponse(BaseModel):
    message: str
    running: bool
