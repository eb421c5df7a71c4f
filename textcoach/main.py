from fastapi import FastAPI
from textcoach.api.routes_analyze import router as analyze_router
from textcoach.api.routes_revise import router as revise_router
from textcoach.middleware.limits import BodySizeLimitMiddleware

app = FastAPI(title="TextCoach")

app.add_middleware(BodySizeLimitMiddleware)

@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(analyze_router)
app.include_router(revise_router)
