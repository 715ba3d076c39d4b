from agentgraph_common.base.pagination import Pagination
from agentgraph_common.base.schemas import model_from_row
from agentgraph_projects.domain.schemas import ProjectCreate, ProjectUpdate
from fastapi import APIRouter, Query, status

from agentgraph_api.api.deps import ProjectServiceDep
from agentgraph_api.api.schemas import DataResponse, ListResponse, ProjectResponse

router = APIRouter(prefix="/projects", tags=["projects"])


def _to_response(project) -> ProjectResponse:
    return model_from_row(ProjectResponse, project)


@router.get("", response_model=ListResponse[ProjectResponse])
async def list_projects(
    service: ProjectServiceDep,
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
):
    """List the tenant's projects, newest first."""
    result = await service.list_projects(Pagination.from_params(page, limit))
    return ListResponse.from_result(result, _to_response)


@router.get("/{project_id}", response_model=DataResponse[ProjectResponse])
async def get_project(project_id: str, service: ProjectServiceDep):
    project = await service.get_project(project_id)
    return DataResponse(data=_to_response(project))


@router.post("", response_model=DataResponse[ProjectResponse], status_code=status.HTTP_201_CREATED)
async def create_project(data: ProjectCreate, service: ProjectServiceDep):
    project = await service.create_project(data)
    return DataResponse(data=_to_response(project))


@router.patch("/{project_id}", response_model=DataResponse[ProjectResponse])
async def update_project(project_id: str, data: ProjectUpdate, service: ProjectServiceDep):
    """Partially update a project; a new stopWhen cascades to graphs and sub-agents."""
    project = await service.update_project(project_id, data)
    return DataResponse(data=_to_response(project))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, service: ProjectServiceDep):
    """Delete an empty project; 409 while it still owns resources."""
    await service.delete_project(project_id)
