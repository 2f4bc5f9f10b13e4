from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from cellar.db import get_session
from cellar.services.uploads import ImageUploadService


def get_upload_service(request: Request) -> ImageUploadService:
    # Built and initialized once in the app lifespan.
    return request.app.state.uploads


SessionDep = Annotated[Session, Depends(get_session)]
UploadServiceDep = Annotated[ImageUploadService, Depends(get_upload_service)]
