import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agroagent import config
from agroagent.routes import disease_routes

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

app = FastAPI(
    title="AI Agro Agent",
    description="Crop disease detection gateway for the AI Agro Agent front-end",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# Route integrations
app.include_router(disease_routes.router, tags=["Crop Disease Detection"])


# Health check route
@app.get("/")
def home():
    return {
        "message": "Welcome to AI Agro Agent gateway! POST an image to /crop-detect.",
        "model": config.AI_MODEL,
    }


# For running directly (useful for debugging)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8001)
