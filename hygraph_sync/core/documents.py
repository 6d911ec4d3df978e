"""Static GraphQL documents for the management and content APIs.

Documents are parsed with graphql-core at import time so syntax errors
surface immediately; the executor prints them back when sending.
"""

from graphql import parse

GET_SCHEMA = parse("""
    query getSchema($projectId: ID!, $environmentName: String!) {
        viewer {
            __typename
            id
            project(id: $projectId) {
                __typename
                id
                name
                maxPaginationSize
                environment(name: $environmentName) {
                    __typename
                    id
                    name
                    contentModel {
                        __typename
                        locales {
                            id
                            apiId
                            isDefault
                        }
                        assetModel {
                            id
                        }
                        models {
                            ...ModelFragment
                        }
                        components {
                            ...ComponentFragment
                        }
                    }
                }
            }
        }
    }

    fragment ModelFragment on IModel {
        __typename
        id
        apiId
        apiIdPlural
        displayName
        description
        isSystem
        fields(includeHiddenFields: true, includeApiOnlyFields: true) {
            ...FieldFragment
        }
    }

    fragment ComponentFragment on Component {
        __typename
        id
        apiId
        apiIdPlural
        displayName
        description
        isSystem
        fields(includeHiddenFields: true, includeApiOnlyFields: true) {
            ...FieldFragment
        }
    }

    fragment FieldFragment on IField {
        __typename
        id
        apiId
        description
        isList
        isSystem
        ... on SimpleField {
            type_simple: type
        }
        ... on EnumerableField {
            type_enum: type
        }
        ... on RelationalField {
            type_relation: type
            relatedModel {
                __typename
                id
                apiId
            }
        }
        ... on UniDirectionalRelationalField {
            type_relation: type
            relatedModel {
                __typename
                id
                apiId
            }
        }
        ... on UnionField {
            type_union: type
            isMemberType
            union {
                __typename
                id
                apiId
                memberTypes {
                    __typename
                    id
                    apiId
                    parent {
                        __typename
                        id
                        apiId
                    }
                }
            }
        }
        ... on RemoteField {
            type_remote: type
        }
        ... on ComponentField {
            type_component: type
            component {
                __typename
                id
                apiId
            }
        }
        ... on ComponentUnionField {
            type_componentUnion: type
            components {
                __typename
                id
                apiId
            }
        }
    }
""")

GET_WEBHOOKS = parse("""
    query getWebhooks($projectId: ID!, $environmentName: String!) {
        viewer {
            project(id: $projectId) {
                environment(name: $environmentName) {
                    id
                    webhooks {
                        id
                        name
                        url
                        isActive
                    }
                }
            }
        }
    }
""")

CREATE_WEBHOOK = parse("""
    mutation createWebhook($data: CreateWebhookInput!) {
        createWebhook(data: $data) {
            createdWebhook {
                id
                name
                url
                isActive
            }
        }
    }
""")

UPDATE_WEBHOOK = parse("""
    mutation updateWebhook($data: UpdateWebhookInput!) {
        updateWebhook(data: $data) {
            updatedWebhook {
                id
                isActive
            }
        }
    }
""")

CREATE_ASSET_WITH_URL = parse("""
    mutation createAssetWithURL($fileName: String!, $uploadUrl: String!) {
        createAsset(data: { fileName: $fileName, uploadUrl: $uploadUrl }) {
            id
            url
            upload {
                status
                error {
                    code
                    message
                }
            }
        }
    }
""")
