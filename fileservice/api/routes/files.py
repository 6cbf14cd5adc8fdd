import logging
import mimetypes
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from ..dependencies import get_local_store
from ..exceptions import InvalidFileNameError
from ..local_storage import LocalFileStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload")
async def upload_file(file: UploadFile = File(...), local_store: LocalFileStore = Depends(get_local_store)):
    """Store an uploaded file in local storage under its own name"""
    try:
        content = await file.read()
        logger.info(f"Uploading file: {file.filename} ({len(content)} bytes)")
        name = local_store.store(file.filename or "", content)
        return {"message": f"File uploaded successfully: {name}", "filename": name, "size": len(content)}

    except InvalidFileNameError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Upload error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/download/{filename:path}")
def download_file(filename: str, local_store: LocalFileStore = Depends(get_local_store)):
    """Download a stored file"""
    try:
        content = local_store.retrieve(filename)
        content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        encoded_filename = quote(filename.rsplit("/", 1)[-1])
        return Response(
            content=content,
            media_type=content_type,
            headers={"Content-Disposition": f"attachment; filename*=UTF-8''{encoded_filename}"},
        )

    except (InvalidFileNameError, FileNotFoundError):
        raise HTTPException(status_code=404, detail=f"File not found: {filename}")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Download error for {filename}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/list")
def list_files(local_store: LocalFileStore = Depends(get_local_store)) -> list[str]:
    """List stored files relative to the storage root"""
    try:
        return local_store.list()
    except Exception as e:
        logger.error(f"List files error: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/delete/{filename:path}")
def delete_file(filename: str, local_store: LocalFileStore = Depends(get_local_store)):
    """Delete a stored file"""
    try:
        if not local_store.delete(filename):
            raise HTTPException(status_code=404, detail=f"File not found: {filename}")
        return {"message": f"File deleted successfully: {filename}"}

    except InvalidFileNameError:
        raise HTTPException(status_code=404, detail=f"File not found: {filename}")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Delete error for {filename}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
