"""bcrypt hashing, run in a worker thread so slow hashes don't stall the loop."""
import asyncio

import bcrypt


async def hash_password(password: str, *, work_factor: int) -> str:
    salt = bcrypt.gensalt(rounds=work_factor)
    hashed = await asyncio.to_thread(bcrypt.hashpw, password.encode(), salt)
    return hashed.decode()


async def check_password(password: str, hashed: str) -> bool:
    return await asyncio.to_thread(bcrypt.checkpw, password.encode(), hashed.encode())
