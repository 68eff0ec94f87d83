from __future__ import annotations

"""Header synonym tables.

Each entry is the ordered list of header spellings accepted for one logical
field; the first non-empty match wins. Add spellings here rather than
branching in the mappers.
"""

# -- customer list (customer file of the customer-list archive)
CUSTOMER_NAME = ("accountName", "customerName", "Company Name")
CUSTOMER_ADDRESS_1 = ("btStreet", "address1", "Street Address")
CUSTOMER_ADDRESS_2 = ("btAddress2", "address2")
CUSTOMER_ADDRESS_3 = ("btAddress3", "address3")
CUSTOMER_CITY = ("btCity", "city", "City")
CUSTOMER_STATE = ("btState", "state", "State")
CUSTOMER_ZIP = ("btZip", "zip", "Zip")
CUSTOMER_COUNTRY = ("btCountry", "country", "Country")
CUSTOMER_PHONE = ("btTelephone", "phone", "Phone")
CUSTOMER_FAX = ("btFax", "fax", "Fax")
CUSTOMER_USER_ID = ("billContactUserID", "userID", "userId", "user_id")
CUSTOMER_TERMS = ("btTerms",)
CUSTOMER_SALESMAN_ID = ("salesmanID",)
CUSTOMER_IS_TAXABLE = ("isTaxable",)
CUSTOMER_REQUIRE_PO = ("requirePO",)

# -- user list (list_customer_user.csv)
USER_ID = ("userID",)
USER_EMAIL = ("contactEmail",)

# -- order import (order file)
ORDER_INVOICE = ("Invoice Number", "Invoice #", "Order Number")
ORDER_CUSTOMER_NAME = ("Customer Name",)
ORDER_DUE_DATE = ("Due date", "Due Date")
ORDER_SHIP_DATE = ("Shipping date", "Ship Date")
ORDER_PO_NUMBER = ("Custom Field 1-po#", "PO Number", "PO #")
ORDER_PRODUCT_NAME = ("Line: Product Name", "Product Name")
ORDER_QUANTITY = ("Line: Quantity", "Quantity")
ORDER_UNIT_PRICE = ("Line: Unit price", "Unit Price")
ORDER_AMOUNT = ("Line: Amount", "Amount")

# -- order import (customer file)
CONTACT_CUSTOMER_ID = ("Customer ID",)
CONTACT_CUSTOMER_NAME = ("Customer Name",)
CONTACT_FIRST_NAME = ("Bill to Contact First Name",)
CONTACT_LAST_NAME = ("Bill to Contact Last Name",)

# -- WIP spreadsheet
WIP_ORDER_ID = (
    "Order ID", "OrderID", "Order Id", "order id", "ORDER ID",
    "Job ID", "JobID", "Job Number", "Order Number", "Order #",
)
WIP_CUSTOMER_NAME = (
    "Customer Name", "CustomerName", "Customer", "customer name",
    "CUSTOMER NAME", "Client Name", "Client",
)
WIP_SALESPERSON = ("Salesperson", "Sales Person", "Sales Rep", "SalesRep", "salesperson", "SALESPERSON", "Rep")
WIP_CSR = ("CSR", "csr", "Customer Service Rep", "Service Rep")
WIP_PROJECT_NAME = (
    "Project Name", "ProjectName", "Project", "project name", "PROJECT NAME",
    "Job Name", "Description", "Job Description",
)
WIP_ORDER_DATE = ("Order Date", "OrderDate", "order date", "ORDER DATE", "Date Ordered", "Created Date")
WIP_DUE_DATE = ("Due Date", "DueDate", "due date", "DUE DATE", "Date Due", "Deadline")
WIP_ORDER_VALUE = ("Order Value", "OrderValue", "order value", "ORDER VALUE", "Value", "Amount", "Total", "Price")
