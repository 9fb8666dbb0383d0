from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import re
import random
import string


class ClientBase(BaseModel):
    full_name: str = Field(..., min_length=1)
    whatsapp_number: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)


class ClientCreate(ClientBase):
    pass


class Client(ClientBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


def generate_client_id(full_name: str) -> str:
    # Remove special characters and spaces from name
    clean_name = re.sub(r'[^a-zA-Z0-9]', '', full_name)

    # Take first 3 characters of the name (or pad with 'X' if shorter)
    name_part = clean_name[:3].upper().ljust(3, 'X')

    random_part = ''.join(random.choices(string.ascii_uppercase + string.digits, k=8))

    return f"CL{name_part}{random_part}"
