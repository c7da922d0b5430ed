"""
Calendar Diary API

python version: 3.12

requirements:
    fastapi
    uvicorn[standard]
    sqlalchemy[asyncio]
    asyncpg
    uuid-utils
    pyjwt
    passlib==1.7.4
    bcrypt==4.0.1
    pydantic[email]
    python-dotenv
    pytz
    httpx

```
pip install -e ".[test]"
```
"""
