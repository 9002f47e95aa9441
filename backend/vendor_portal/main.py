from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db.schema import init_db
from .routers import applications, health

app = FastAPI(title="Craft Fair Vendor Portal API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup() -> None:
    init_db()


app.include_router(health.router)
app.include_router(applications.router)


@app.get("/")
def root():
    return {"message": "Craft Fair Vendor Portal API", "docs": "/docs"}
