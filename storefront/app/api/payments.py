from fastapi import APIRouter, Depends

from storefront.common import ApiResponse, create_response

from ..dependencies import get_payment_service
from ..schemas import PaymentRequest, PaymentResponse
from ..services.payments import PaymentService

router = APIRouter(prefix="/payment", tags=["payment"])


@router.post("", response_model=ApiResponse[PaymentResponse])
async def process_payment(
    payload: PaymentRequest,
    service: PaymentService = Depends(get_payment_service),
) -> ApiResponse[PaymentResponse]:
    result = await service.process_payment(payload)
    body = PaymentResponse(transactionId=result.transaction_id, status=result.status)
    return create_response(body, "Payment processed successfully")
